# tests/unit/test_listing_persistence.py
"""Unit tests for ListingRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from src.gm_listing.infrastructure.persistence import (
    _DELETE_LISTING_SQL,
    _RELEASE_SQL,
    _RESERVE_SQL,
    ListingRepository,
)
from tests.unit.fakes import make_listing


def _make_row(**kwargs: Any) -> MagicMock:
    now = datetime.now(UTC)
    row = MagicMock()
    row.id = kwargs.get("id", "LST-1")
    row.seller_id = kwargs.get("seller_id", "farmer-1")
    row.title = kwargs.get("title", "Sharbati wheat")
    row.grain_type = kwargs.get("grain_type", "wheat")
    row.description = kwargs.get("description", "Cleaned")
    row.total_quantity = kwargs.get("total_quantity", Decimal("100.00"))
    row.available_quantity = kwargs.get("available_quantity", Decimal("100.00"))
    row.price_per_unit = kwargs.get("price_per_unit", Decimal("2500.00"))
    row.minimum_order_quantity = kwargs.get("minimum_order_quantity", Decimal("1.00"))
    row.status = kwargs.get("status", "approved")
    row.expires_at = kwargs.get("expires_at", now + timedelta(days=30))
    row.admin_notes = kwargs.get("admin_notes")
    row.approved_by = kwargs.get("approved_by")
    row.approved_at = kwargs.get("approved_at")
    row.created_at = kwargs.get("created_at", now)
    row.updated_at = kwargs.get("updated_at", now)
    return row


def _db_returning(row: Any) -> AsyncMock:
    db = AsyncMock()
    result = MagicMock()
    result.fetchone.return_value = row
    db.execute.return_value = result
    return db


class TestListingRepository:
    async def test_create_executes_insert(self) -> None:
        db = AsyncMock()
        listing = make_listing()
        await ListingRepository().create(db, listing)
        db.execute.assert_awaited_once()
        params = db.execute.call_args[0][1]
        assert params["id"] == "LST-1"
        assert params["available_quantity"] == params["total_quantity"]

    async def test_get_by_id_maps_row(self) -> None:
        db = _db_returning(_make_row(available_quantity=Decimal("42.50")))
        listing = await ListingRepository().get_by_id(db, "LST-1")
        assert listing is not None
        assert listing.available_quantity == Decimal("42.50")
        assert listing.reserved_quantity == Decimal("57.50")

    async def test_get_by_id_missing(self) -> None:
        db = _db_returning(None)
        assert await ListingRepository().get_by_id(db, "LST-404") is None

    async def test_reserve_passes_condition_params(self) -> None:
        now = datetime.now(UTC)
        db = _db_returning(_make_row(available_quantity=Decimal("70.00")))
        listing = await ListingRepository().reserve_quantity(db, "LST-1", Decimal("30"), now)

        assert listing is not None
        assert listing.available_quantity == Decimal("70.00")
        sql, params = db.execute.call_args[0]
        assert sql is _RESERVE_SQL
        assert params == {"listing_id": "LST-1", "quantity": Decimal("30"), "now": now}

    async def test_reserve_zero_rows_returns_none(self) -> None:
        db = _db_returning(None)
        result = await ListingRepository().reserve_quantity(
            db, "LST-1", Decimal("500"), datetime.now(UTC)
        )
        assert result is None

    async def test_release_keyed_on_order(self) -> None:
        db = _db_returning(_make_row())
        listing = await ListingRepository().release_quantity(db, "LST-1", Decimal("30"), "ORD-1")
        assert listing is not None
        sql, params = db.execute.call_args[0]
        assert sql is _RELEASE_SQL
        assert params["order_id"] == "ORD-1"

    async def test_release_already_applied_returns_none(self) -> None:
        db = _db_returning(None)
        assert await ListingRepository().release_quantity(
            db, "LST-1", Decimal("30"), "ORD-1"
        ) is None

    async def test_update_review_status_joins_expected(self) -> None:
        db = _db_returning(_make_row(status="approved", approved_by="admin-1"))
        listing = await ListingRepository().update_review_status(
            db, "LST-1", "approved", ["pending", "rejected"], "ok", "admin-1"
        )
        assert listing is not None
        assert listing.approved_by == "admin-1"
        params = db.execute.call_args[0][1]
        assert params["expected_csv"] == "pending,rejected"

    async def test_sum_active_order_quantity(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one.return_value = Decimal("12.50")
        db.execute.return_value = result
        assert await ListingRepository().sum_active_order_quantity(db, "LST-1") == Decimal("12.50")

    async def test_delete_blocked_returns_false(self) -> None:
        db = _db_returning(None)
        assert await ListingRepository().delete_if_no_active_orders(db, "LST-1") is False
        assert db.execute.call_args[0][0] is _DELETE_LISTING_SQL

    async def test_delete_returns_true(self) -> None:
        db = _db_returning(MagicMock(id="LST-1"))
        assert await ListingRepository().delete_if_no_active_orders(db, "LST-1") is True
