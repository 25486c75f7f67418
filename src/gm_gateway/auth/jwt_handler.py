"""Signed access and refresh tokens.

Tokens carry only the user id (``sub``), the token kind and the issuer;
the role is looked up on every request so a demotion takes effect at once.
There is no revocation list, so a token stays usable until ``exp``.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.gm_common.errors import AppError, InvalidCredentialsError, InvalidRefreshTokenError

ISSUER = "grain-market"

_ALGORITHM = settings.JWT_ALGORITHM
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)

# what a failed decode turns into, by the kind the caller asked for
_ERRORS: dict[str, type[AppError]] = {
    "access": InvalidCredentialsError,
    "refresh": InvalidRefreshTokenError,
}


def _issue(user_id: str, kind: str, lifetime: timedelta) -> str:
    issued_at = datetime.now(UTC)
    claims = {
        "sub": user_id,
        "type": kind,
        "iss": ISSUER,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return str(jwt.encode(claims, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(user_id: str) -> str:
    return _issue(user_id, "access", _ACCESS_EXPIRE)


def create_refresh_token(user_id: str) -> str:
    return _issue(user_id, "refresh", _REFRESH_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, str]:
    """Verify signature, expiry and issuer, and check the token kind.

    A refresh token presented where an access token is expected (or the
    reverse) is rejected like a forged one. Failures raise
    InvalidCredentialsError for access tokens and InvalidRefreshTokenError
    for refresh tokens.
    """
    error = _ERRORS[expected_type]
    try:
        claims = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[_ALGORITHM], issuer=ISSUER
        )
    except JWTError:
        raise error() from None
    if claims.get("type") != expected_type:
        raise error()
    return claims
