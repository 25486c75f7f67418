"""Async engine, session factory and the FastAPI session dependency.

Sessions autobegin; application services own commit/rollback so that a
reservation and the order row it backs land in the same transaction.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the ORM classes kept as DDL reference."""


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def check_database() -> None:
    """Fail fast at startup if PostgreSQL is unreachable or unmigrated."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1 FROM listings LIMIT 1"))


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request.

    Anything a handler left uncommitted (e.g. after an error raised before
    the service reached its own rollback) is rolled back on close.
    """
    async with async_session_factory() as session:
        yield session
