"""OrderRepository: raw SQL persistence for orders and their timelines.

Status changes are conditional on the status the caller read
(``WHERE status = :expected_status``); 0 rows means another request moved
the order first. Timeline rows are append-only, keyed (order_id, seq).

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_order.domain.models import DeliveryAddress, Order, OrderNotes, Rating
from src.gm_order.domain.timeline import Timeline, TimelineEntry

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, buyer_id, seller_id, listing_id,
    quantity, price_per_unit, total_amount, commission_percentage, commission_amount,
    payment_method, payment_status, delivery_type,
    address_name, address_phone, address_street, address_city, address_state, address_pincode,
    status, estimated_delivery_date, actual_delivery_date,
    cancellation_reason, refund_amount, refund_date,
    notes_buyer, notes_farmer, notes_admin,
    buyer_rating_stars, buyer_rating_review, buyer_rating_at,
    seller_rating_stars, seller_rating_review, seller_rating_at,
    created_at, updated_at
"""

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, buyer_id, seller_id, listing_id,
        quantity, price_per_unit, total_amount, commission_percentage, commission_amount,
        payment_method, payment_status, delivery_type,
        address_name, address_phone, address_street, address_city, address_state,
        address_pincode, status, estimated_delivery_date, notes_buyer,
        created_at, updated_at)
    VALUES (:id, :buyer_id, :seller_id, :listing_id,
        :quantity, :price_per_unit, :total_amount, :commission_percentage, :commission_amount,
        :payment_method, :payment_status, :delivery_type,
        :address_name, :address_phone, :address_street, :address_city, :address_state,
        :address_pincode, :status, :estimated_delivery_date, :notes_buyer,
        :created_at, :updated_at)
""")

_INSERT_TIMELINE_SQL = text("""
    INSERT INTO order_timeline (order_id, seq, status, description, actor_id, created_at)
    VALUES (:order_id, :seq, :status, :description, :actor_id, :created_at)
""")

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_GET_TIMELINES_SQL = text("""
    SELECT order_id, seq, status, description, actor_id, created_at
    FROM order_timeline
    WHERE order_id = ANY(string_to_array(CAST(:ids_csv AS TEXT), ','))
    ORDER BY order_id, seq
""")

_APPLY_TRANSITION_SQL = text("""
    UPDATE orders
    SET status = :status,
        payment_status = :payment_status,
        actual_delivery_date = :actual_delivery_date,
        cancellation_reason = :cancellation_reason,
        refund_amount = :refund_amount,
        refund_date = :refund_date,
        notes_buyer = :notes_buyer,
        notes_farmer = :notes_farmer,
        notes_admin = :notes_admin,
        updated_at = :updated_at
    WHERE id = :id AND status = :expected_status
    RETURNING id
""")

# Rating slot columns cannot be bound parameters, so each slot gets its own statement.
_SAVE_RATING_SQL = {
    slot: text(f"""
        UPDATE orders
        SET {slot}_stars = :stars, {slot}_review = :review, {slot}_at = :rated_at,
            updated_at = NOW()
        WHERE id = :id AND status = 'delivered'
        RETURNING id
    """)
    for slot in ("buyer_rating", "seller_rating")
}

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (CAST(:buyer_id AS TEXT) IS NULL OR buyer_id = :buyer_id)
      AND (CAST(:seller_id AS TEXT) IS NULL OR seller_id = :seller_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_CLOSED_FOR_LISTING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE listing_id = :listing_id AND status IN ('cancelled', 'refunded')
    ORDER BY id
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _rating(stars: int | None, review: str | None, rated_at: Any) -> Rating | None:
    if stars is None:
        return None
    return Rating(stars=stars, review=review, rated_at=rated_at)


def _row_to_entry(row: Any) -> TimelineEntry:
    return TimelineEntry(
        status=row.status,
        timestamp=row.created_at,
        description=row.description,
        actor_id=row.actor_id,
    )


def _row_to_order(row: Any, timeline: Timeline) -> Order:
    """Convert a DB result row (plus its timeline rows) to an Order domain object."""
    return Order(
        id=row.id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        listing_id=row.listing_id,
        quantity=row.quantity,
        price_per_unit=row.price_per_unit,
        total_amount=row.total_amount,
        commission_percentage=row.commission_percentage,
        commission_amount=row.commission_amount,
        payment_method=row.payment_method,
        delivery_address=DeliveryAddress(
            name=row.address_name,
            phone=row.address_phone,
            street=row.address_street,
            city=row.address_city,
            state=row.address_state,
            pincode=row.address_pincode,
        ),
        delivery_type=row.delivery_type,
        status=row.status,
        payment_status=row.payment_status,
        timeline=timeline,
        estimated_delivery_date=row.estimated_delivery_date,
        actual_delivery_date=row.actual_delivery_date,
        cancellation_reason=row.cancellation_reason,
        refund_amount=row.refund_amount,
        refund_date=row.refund_date,
        notes=OrderNotes(buyer=row.notes_buyer, farmer=row.notes_farmer, admin=row.notes_admin),
        buyer_rating=_rating(row.buyer_rating_stars, row.buyer_rating_review, row.buyer_rating_at),
        seller_rating=_rating(
            row.seller_rating_stars, row.seller_rating_review, row.seller_rating_at
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def create(self, db: AsyncSession, order: Order) -> None:
        address = order.delivery_address
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "buyer_id": order.buyer_id,
                "seller_id": order.seller_id,
                "listing_id": order.listing_id,
                "quantity": order.quantity,
                "price_per_unit": order.price_per_unit,
                "total_amount": order.total_amount,
                "commission_percentage": order.commission_percentage,
                "commission_amount": order.commission_amount,
                "payment_method": order.payment_method,
                "payment_status": order.payment_status,
                "delivery_type": order.delivery_type,
                "address_name": address.name,
                "address_phone": address.phone,
                "address_street": address.street,
                "address_city": address.city,
                "address_state": address.state,
                "address_pincode": address.pincode,
                "status": order.status,
                "estimated_delivery_date": order.estimated_delivery_date,
                "notes_buyer": order.notes.buyer,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            },
        )
        for seq, entry in enumerate(order.timeline):
            await self._insert_entry(db, order.id, seq, entry)

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        if row is None:
            return None
        timelines = await self._load_timelines(db, [row.id])
        return _row_to_order(row, timelines.get(row.id, Timeline()))

    async def apply_transition(
        self, db: AsyncSession, order: Order, expected_status: str
    ) -> bool:
        """Persist ``order``'s new status fields and its newest timeline entry.

        Returns False (and writes nothing) if the stored status is no longer
        ``expected_status``.
        """
        result = await db.execute(
            _APPLY_TRANSITION_SQL,
            {
                "id": order.id,
                "expected_status": expected_status,
                "status": order.status,
                "payment_status": order.payment_status,
                "actual_delivery_date": order.actual_delivery_date,
                "cancellation_reason": order.cancellation_reason,
                "refund_amount": order.refund_amount,
                "refund_date": order.refund_date,
                "notes_buyer": order.notes.buyer,
                "notes_farmer": order.notes.farmer,
                "notes_admin": order.notes.admin,
                "updated_at": order.updated_at,
            },
        )
        if result.fetchone() is None:
            return False
        entry = order.timeline.last
        if entry is not None:
            await self._insert_entry(db, order.id, len(order.timeline) - 1, entry)
        return True

    async def save_rating(
        self, db: AsyncSession, order_id: str, slot: str, rating: Rating
    ) -> bool:
        result = await db.execute(
            _SAVE_RATING_SQL[slot],
            {
                "id": order_id,
                "stars": rating.stars,
                "review": rating.review,
                "rated_at": rating.rated_at,
            },
        )
        return result.fetchone() is not None

    async def list_orders(
        self,
        db: AsyncSession,
        buyer_id: str | None,
        seller_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "buyer_id": buyer_id,
                "seller_id": seller_id,
                "status": status,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return await self._with_timelines(db, result.fetchall())

    async def list_closed_for_listing(self, db: AsyncSession, listing_id: str) -> list[Order]:
        result = await db.execute(_LIST_CLOSED_FOR_LISTING_SQL, {"listing_id": listing_id})
        return await self._with_timelines(db, result.fetchall())

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _insert_entry(
        self, db: AsyncSession, order_id: str, seq: int, entry: TimelineEntry
    ) -> None:
        await db.execute(
            _INSERT_TIMELINE_SQL,
            {
                "order_id": order_id,
                "seq": seq,
                "status": entry.status,
                "description": entry.description,
                "actor_id": entry.actor_id,
                "created_at": entry.timestamp,
            },
        )

    async def _load_timelines(self, db: AsyncSession, order_ids: list[str]) -> dict[str, Timeline]:
        if not order_ids:
            return {}
        result = await db.execute(_GET_TIMELINES_SQL, {"ids_csv": ",".join(order_ids)})
        grouped: dict[str, list[TimelineEntry]] = {}
        for row in result.fetchall():
            grouped.setdefault(row.order_id, []).append(_row_to_entry(row))
        return {order_id: Timeline(entries) for order_id, entries in grouped.items()}

    async def _with_timelines(self, db: AsyncSession, rows: list[Any]) -> list[Order]:
        timelines = await self._load_timelines(db, [row.id for row in rows])
        return [_row_to_order(row, timelines.get(row.id, Timeline())) for row in rows]
