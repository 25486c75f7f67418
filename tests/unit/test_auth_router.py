"""HTTP-level tests for /api/v1/auth/me."""

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from src.gm_common.actor import Actor
from src.gm_common.enums import Role
from src.gm_gateway.user import service as user_service
from src.gm_gateway.user.db_models import UserModel

ActAs = Callable[[Actor], None]


def _user() -> UserModel:
    return UserModel(
        id=uuid.uuid4(),
        username="kisan_1",
        email="kisan@example.com",
        phone="9876543210",
        password_hash="$2b$hash",
        role="farmer",
        is_active=True,
        created_at=datetime(2026, 9, 14, tzinfo=timezone.utc),
    )


async def test_me_returns_profile(
    client: AsyncClient, act_as: ActAs, monkeypatch: pytest.MonkeyPatch
) -> None:
    user = _user()

    async def _get_user(db: object, user_id: str) -> UserModel | None:
        return user if user_id == str(user.id) else None

    monkeypatch.setattr(user_service, "get_user", _get_user)
    act_as(Actor(id=str(user.id), role=Role.FARMER))

    resp = await client.get("/api/v1/auth/me", headers={"X-Request-ID": "req-me"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["request_id"] == "req-me"
    assert body["data"] == {
        "user_id": str(user.id),
        "username": "kisan_1",
        "email": "kisan@example.com",
        "phone": "9876543210",
        "role": "farmer",
        "is_active": True,
    }


async def test_me_for_vanished_user(
    client: AsyncClient, act_as: ActAs, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _get_user(db: object, user_id: str) -> None:
        return None

    monkeypatch.setattr(user_service, "get_user", _get_user)
    act_as(Actor(id=str(uuid.uuid4()), role=Role.BUYER))

    resp = await client.get("/api/v1/auth/me")

    assert resp.status_code == 401
    assert resp.json()["code"] == 1003


async def test_me_requires_token(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401
