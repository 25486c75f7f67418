"""Fixtures wiring the in-memory fakes from tests/unit/fakes.py."""

from collections.abc import AsyncIterator, Callable, Iterator
from unittest.mock import AsyncMock

import pytest

from src.gm_common.actor import Actor
from src.gm_common.database import get_db_session
from src.gm_gateway.auth.dependencies import get_current_actor
from src.main import app
from tests.unit.fakes import (
    FakeListingRepository,
    FakeOrderRepository,
    RecordingNotifier,
    make_listing,
)


@pytest.fixture
def listing_repo() -> FakeListingRepository:
    return FakeListingRepository(make_listing())


@pytest.fixture
def order_repo(listing_repo: FakeListingRepository) -> FakeOrderRepository:
    return FakeOrderRepository(listing_repo)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def act_as() -> Iterator[Callable[[Actor], None]]:
    """Bypass token auth and a real DB session for router tests."""

    async def _db() -> AsyncIterator[AsyncMock]:
        yield AsyncMock()

    app.dependency_overrides[get_db_session] = _db

    def _set(actor: Actor) -> None:
        app.dependency_overrides[get_current_actor] = lambda: actor

    yield _set
    app.dependency_overrides.clear()
