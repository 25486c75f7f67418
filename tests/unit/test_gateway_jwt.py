"""Unit tests for gm_gateway JWT tokens."""

from collections.abc import Callable
from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from config.settings import settings
from src.gm_common.errors import InvalidCredentialsError, InvalidRefreshTokenError
from src.gm_gateway.auth.jwt_handler import (
    ISSUER,
    create_access_token,
    create_refresh_token,
    decode_token,
)


class TestClaims:
    @pytest.mark.parametrize(
        ("factory", "token_type"),
        [(create_access_token, "access"), (create_refresh_token, "refresh")],
    )
    def test_subject_and_type(self, factory: Callable[[str], str], token_type: str) -> None:
        claims = jwt.get_unverified_claims(factory("farmer-7"))
        assert claims["sub"] == "farmer-7"
        assert claims["type"] == token_type
        assert claims["exp"] > claims["iat"]

    def test_issuer(self) -> None:
        assert jwt.get_unverified_claims(create_access_token("farmer-7"))["iss"] == ISSUER

    def test_role_is_not_embedded(self) -> None:
        # roles are read from the users table on every request
        assert "role" not in jwt.get_unverified_claims(create_access_token("farmer-7"))


class TestDecode:
    def test_access_round_trip(self) -> None:
        assert decode_token(create_access_token("buyer-1"), "access")["sub"] == "buyer-1"

    def test_refresh_round_trip(self) -> None:
        assert decode_token(create_refresh_token("buyer-1"), "refresh")["sub"] == "buyer-1"

    def test_types_are_not_interchangeable(self) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            decode_token(create_access_token("buyer-1"), "refresh")
        with pytest.raises(InvalidCredentialsError):
            decode_token(create_refresh_token("buyer-1"), "access")

    def test_expired_access(self) -> None:
        with patch("src.gm_gateway.auth.jwt_handler._ACCESS_EXPIRE", timedelta(seconds=-1)):
            token = create_access_token("buyer-1")
        with pytest.raises(InvalidCredentialsError):
            decode_token(token, "access")

    def test_expired_refresh(self) -> None:
        with patch("src.gm_gateway.auth.jwt_handler._REFRESH_EXPIRE", timedelta(seconds=-1)):
            token = create_refresh_token("buyer-1")
        with pytest.raises(InvalidRefreshTokenError):
            decode_token(token, "refresh")

    def test_foreign_secret_rejected(self) -> None:
        forged = jwt.encode({"sub": "admin-1", "type": "access"}, "not-our-secret", "HS256")
        with pytest.raises(InvalidCredentialsError):
            decode_token(forged, "access")

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidCredentialsError):
            decode_token("abc.def.ghi", "access")

    def test_other_issuer_rejected(self) -> None:
        token = jwt.encode(
            {"sub": "buyer-1", "type": "access", "iss": "someone-else"},
            settings.JWT_SECRET,
            "HS256",
        )
        with pytest.raises(InvalidCredentialsError):
            decode_token(token, "access")
