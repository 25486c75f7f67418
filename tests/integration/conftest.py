"""Integration-test fixtures.

Requires PostgreSQL with migrations applied (``alembic upgrade head``).
Every test module is skipped when the database cannot be reached.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool (created at import time) stays valid across
the whole session.
"""

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.gm_common.database import async_session_factory, check_database
from src.main import app

Headers = dict[str, str]


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncIterator[AsyncClient]:  # type: ignore[override]
    try:
        await check_database()
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"PostgreSQL not available: {exc}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def register(client: AsyncClient) -> Callable[[str], Awaitable[Headers]]:
    """Register a fresh user with ``role`` and return its Authorization header.

    Admins cannot self-register, so they are registered as buyers and then
    promoted directly in the database.
    """

    async def _register(role: str) -> Headers:
        uid = uuid.uuid4().hex[:8]
        creds = {"username": f"{role}_{uid}", "password": "Harvest2026"}
        resp = await client.post(
            "/api/v1/auth/register",
            json={
                **creds,
                "email": f"{role}_{uid}@example.com",
                "role": "buyer" if role == "admin" else role,
            },
        )
        assert resp.status_code == 201, resp.text
        if role == "admin":
            async with async_session_factory() as session:
                await session.execute(
                    text("UPDATE users SET role = 'admin' WHERE username = :u"),
                    {"u": creds["username"]},
                )
                await session.commit()
        login = await client.post("/api/v1/auth/login", json=creds)
        return {"Authorization": f"Bearer {login.json()['data']['access_token']}"}

    return _register
