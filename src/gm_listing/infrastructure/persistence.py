"""ListingRepository: raw SQL persistence for listings and inventory.

Every available_quantity mutation is a single conditional UPDATE: a result
of 0 rows means the condition failed (not enough stock, listing no longer
approved or expired, or release already applied for that order). Nothing
here reads a quantity and writes back a computed value.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_listing.domain.models import Listing

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, seller_id, title, grain_type, description,
    total_quantity, available_quantity, price_per_unit, minimum_order_quantity,
    status, expires_at, admin_notes, approved_by, approved_at,
    created_at, updated_at
"""

_INSERT_LISTING_SQL = text("""
    INSERT INTO listings (id, seller_id, title, grain_type, description,
        total_quantity, available_quantity, price_per_unit, minimum_order_quantity,
        status, expires_at)
    VALUES (:id, :seller_id, :title, :grain_type, :description,
        :total_quantity, :available_quantity, :price_per_unit, :minimum_order_quantity,
        :status, :expires_at)
""")

_GET_LISTING_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM listings WHERE id = :listing_id
""")

_RESERVE_SQL = text(f"""
    UPDATE listings
    SET available_quantity = available_quantity - :quantity,
        updated_at = NOW()
    WHERE id = :listing_id
      AND status = 'approved'
      AND expires_at > :now
      AND available_quantity >= :quantity
    RETURNING {_COLUMNS}
""")

# The release row is only written if the listing exists; ON CONFLICT makes a
# second release for the same order insert nothing, so the UPDATE joins no
# rows and available_quantity is untouched.
_RELEASE_SQL = text("""
    WITH released AS (
        INSERT INTO inventory_releases (order_id, listing_id, quantity)
        SELECT :order_id, id, :quantity FROM listings WHERE id = :listing_id
        ON CONFLICT (order_id) DO NOTHING
        RETURNING listing_id, quantity
    )
    UPDATE listings AS l
    SET available_quantity = LEAST(l.total_quantity, l.available_quantity + r.quantity),
        updated_at = NOW()
    FROM released AS r
    WHERE l.id = r.listing_id
    RETURNING l.id, l.seller_id, l.title, l.grain_type, l.description,
              l.total_quantity, l.available_quantity, l.price_per_unit,
              l.minimum_order_quantity, l.status, l.expires_at, l.admin_notes,
              l.approved_by, l.approved_at, l.created_at, l.updated_at
""")

_UPDATE_REVIEW_STATUS_SQL = text(f"""
    UPDATE listings
    SET status = :status,
        admin_notes = COALESCE(CAST(:admin_notes AS TEXT), admin_notes),
        approved_by = CASE WHEN :status = 'approved'
                           THEN CAST(:approved_by AS TEXT) ELSE approved_by END,
        approved_at = CASE WHEN :status = 'approved' THEN NOW() ELSE approved_at END,
        updated_at = NOW()
    WHERE id = :listing_id
      AND status = ANY(string_to_array(CAST(:expected_csv AS TEXT), ','))
    RETURNING {_COLUMNS}
""")

_ACTIVE_ORDER_QUANTITY_SQL = text("""
    SELECT COALESCE(SUM(quantity), 0)
    FROM orders
    WHERE listing_id = :listing_id
      AND status NOT IN ('cancelled', 'refunded')
""")

_DELETE_LISTING_SQL = text("""
    DELETE FROM listings
    WHERE id = :listing_id
      AND NOT EXISTS (
          SELECT 1 FROM orders
          WHERE listing_id = :listing_id
            AND status IN ('pending', 'confirmed', 'paid', 'shipped')
      )
    RETURNING id
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_listing(row: Any) -> Listing:
    return Listing(
        id=row.id,
        seller_id=row.seller_id,
        title=row.title,
        grain_type=row.grain_type,
        description=row.description,
        total_quantity=row.total_quantity,
        available_quantity=row.available_quantity,
        price_per_unit=row.price_per_unit,
        minimum_order_quantity=row.minimum_order_quantity,
        status=row.status,
        expires_at=row.expires_at,
        admin_notes=row.admin_notes,
        approved_by=row.approved_by,
        approved_at=row.approved_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    """Concrete implementation of ListingRepositoryProtocol using raw SQL."""

    async def create(self, db: AsyncSession, listing: Listing) -> None:
        await db.execute(
            _INSERT_LISTING_SQL,
            {
                "id": listing.id,
                "seller_id": listing.seller_id,
                "title": listing.title,
                "grain_type": listing.grain_type,
                "description": listing.description,
                "total_quantity": listing.total_quantity,
                "available_quantity": listing.available_quantity,
                "price_per_unit": listing.price_per_unit,
                "minimum_order_quantity": listing.minimum_order_quantity,
                "status": listing.status,
                "expires_at": listing.expires_at,
            },
        )

    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None:
        result = await db.execute(_GET_LISTING_SQL, {"listing_id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def reserve_quantity(
        self, db: AsyncSession, listing_id: str, quantity: Decimal, now: datetime
    ) -> Listing | None:
        result = await db.execute(
            _RESERVE_SQL, {"listing_id": listing_id, "quantity": quantity, "now": now}
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def release_quantity(
        self, db: AsyncSession, listing_id: str, quantity: Decimal, order_id: str
    ) -> Listing | None:
        result = await db.execute(
            _RELEASE_SQL,
            {"listing_id": listing_id, "quantity": quantity, "order_id": order_id},
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def update_review_status(
        self,
        db: AsyncSession,
        listing_id: str,
        status: str,
        expected_statuses: list[str],
        admin_notes: str | None,
        approved_by: str | None,
    ) -> Listing | None:
        result = await db.execute(
            _UPDATE_REVIEW_STATUS_SQL,
            {
                "listing_id": listing_id,
                "status": status,
                "expected_csv": ",".join(expected_statuses),
                "admin_notes": admin_notes,
                "approved_by": approved_by,
            },
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def sum_active_order_quantity(self, db: AsyncSession, listing_id: str) -> Decimal:
        result = await db.execute(_ACTIVE_ORDER_QUANTITY_SQL, {"listing_id": listing_id})
        return Decimal(result.scalar_one())

    async def delete_if_no_active_orders(self, db: AsyncSession, listing_id: str) -> bool:
        result = await db.execute(_DELETE_LISTING_SQL, {"listing_id": listing_id})
        return result.fetchone() is not None
