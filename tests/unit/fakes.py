"""In-memory repositories and builders shared by the unit tests.

The fakes mirror the conditional-UPDATE semantics of the SQL repositories:
reserve only succeeds when the listing is approved, unexpired and has
enough quantity; release is recorded per order id and clamped at total.
"""

import asyncio
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from src.gm_common.actor import Actor
from src.gm_common.enums import Role
from src.gm_listing.domain.inventory import apply_release
from src.gm_listing.domain.models import Listing
from src.gm_order.domain.models import DeliveryAddress, Order, Rating

BUYER = Actor(id="buyer-1", role=Role.BUYER, email="buyer@example.com")
OTHER_BUYER = Actor(id="buyer-2", role=Role.BUYER, email="buyer2@example.com")
FARMER = Actor(id="farmer-1", role=Role.FARMER, email="farmer@example.com")
OTHER_FARMER = Actor(id="farmer-2", role=Role.FARMER, email="farmer2@example.com")
ADMIN = Actor(id="admin-1", role=Role.ADMIN, email="admin@example.com")

_TERMINAL = ("delivered", "cancelled", "refunded")

ADDRESS = DeliveryAddress(
    name="Ravi Kumar",
    phone="9876543210",
    street="12 Market Road",
    city="Indore",
    state="Madhya Pradesh",
    pincode="452001",
)


def make_listing(**kwargs: object) -> Listing:
    now = datetime.now(UTC)
    defaults: dict[str, object] = {
        "id": "LST-1",
        "seller_id": FARMER.id,
        "title": "Sharbati wheat",
        "grain_type": "wheat",
        "description": "Cleaned, 2025 harvest",
        "total_quantity": Decimal("100"),
        "available_quantity": Decimal("100"),
        "price_per_unit": Decimal("2500.00"),
        "minimum_order_quantity": Decimal("1"),
        "status": "approved",
        "expires_at": now + timedelta(days=30),
        "created_at": now,
        "updated_at": now,
    }
    defaults.update(kwargs)
    return Listing(**defaults)  # type: ignore[arg-type]


class FakeListingRepository:
    def __init__(self, *listings: Listing) -> None:
        self.listings: dict[str, Listing] = {item.id: item for item in listings}
        self.releases: dict[str, Decimal] = {}
        self.active_quantity: dict[str, Decimal] = {}  # held by non-cancelled, non-refunded orders
        self.open_quantity: dict[str, Decimal] = {}  # held by orders not yet in a terminal status
        self._lock = asyncio.Lock()

    async def create(self, db: object, listing: Listing) -> None:
        self.listings[listing.id] = listing

    async def get_by_id(self, db: object, listing_id: str) -> Listing | None:
        return self.listings.get(listing_id)

    async def reserve_quantity(
        self, db: object, listing_id: str, quantity: Decimal, now: datetime
    ) -> Listing | None:
        await asyncio.sleep(0)  # let concurrent reservers interleave
        async with self._lock:
            listing = self.listings.get(listing_id)
            if (
                listing is None
                or listing.status != "approved"
                or listing.expires_at is None
                or listing.expires_at <= now
                or listing.available_quantity < quantity
            ):
                return None
            listing = replace(listing, available_quantity=listing.available_quantity - quantity)
            self.listings[listing_id] = listing
            return listing

    async def release_quantity(
        self, db: object, listing_id: str, quantity: Decimal, order_id: str
    ) -> Listing | None:
        async with self._lock:
            listing = self.listings.get(listing_id)
            if listing is None or order_id in self.releases:
                return None
            self.releases[order_id] = quantity
            listing = apply_release(listing, quantity)
            self.listings[listing_id] = listing
            return listing

    async def update_review_status(
        self,
        db: object,
        listing_id: str,
        status: str,
        expected_statuses: list[str],
        admin_notes: str | None,
        approved_by: str | None,
    ) -> Listing | None:
        listing = self.listings.get(listing_id)
        if listing is None or listing.status not in expected_statuses:
            return None
        listing = replace(
            listing,
            status=status,
            admin_notes=admin_notes if admin_notes is not None else listing.admin_notes,
            approved_by=approved_by if status == "approved" else listing.approved_by,
            approved_at=datetime.now(UTC) if status == "approved" else listing.approved_at,
        )
        self.listings[listing_id] = listing
        return listing

    async def sum_active_order_quantity(self, db: object, listing_id: str) -> Decimal:
        return self.active_quantity.get(listing_id, Decimal("0"))

    async def delete_if_no_active_orders(self, db: object, listing_id: str) -> bool:
        if self.open_quantity.get(listing_id, Decimal("0")) > 0:
            return False
        return self.listings.pop(listing_id, None) is not None


# VARCHAR widths from migrations 004 and 005; PostgreSQL rejects longer values
_COLUMN_WIDTHS = {"cancellation_reason": 200, "notes": 500, "description": 300}


def _check_widths(order: Order) -> None:
    values = [("cancellation_reason", order.cancellation_reason)]
    values += [("notes", getattr(order.notes, role)) for role in ("buyer", "farmer", "admin")]
    values += [("description", entry.description) for entry in order.timeline.entries]
    for column, value in values:
        if value is not None and len(value) > _COLUMN_WIDTHS[column]:
            raise ValueError(f"value too long for {column} ({len(value)} chars)")


class FakeOrderRepository:
    def __init__(self, listing_repo: FakeListingRepository | None = None) -> None:
        self.orders: dict[str, Order] = {}
        self._listing_repo = listing_repo

    def _sync_active(self, listing_id: str) -> None:
        if self._listing_repo is None:
            return
        mine = [o for o in self.orders.values() if o.listing_id == listing_id]
        self._listing_repo.active_quantity[listing_id] = sum(
            (o.quantity for o in mine if o.holds_inventory), Decimal("0")
        )
        self._listing_repo.open_quantity[listing_id] = sum(
            (o.quantity for o in mine if o.status not in _TERMINAL), Decimal("0")
        )

    async def create(self, db: object, order: Order) -> None:
        _check_widths(order)
        self.orders[order.id] = order
        self._sync_active(order.listing_id)

    async def get_by_id(self, db: object, order_id: str) -> Order | None:
        return self.orders.get(order_id)

    async def apply_transition(self, db: object, order: Order, expected_status: str) -> bool:
        current = self.orders.get(order.id)
        if current is None or current.status != expected_status:
            return False
        _check_widths(order)
        self.orders[order.id] = order
        self._sync_active(order.listing_id)
        return True

    async def save_rating(self, db: object, order_id: str, slot: str, rating: Rating) -> bool:
        current = self.orders.get(order_id)
        if current is None or current.status != "delivered":
            return False
        self.orders[order_id] = replace(current, **{slot: rating})
        return True

    async def list_orders(
        self,
        db: object,
        buyer_id: str | None,
        seller_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        rows = sorted(self.orders.values(), key=lambda o: o.id, reverse=True)
        rows = [
            o for o in rows
            if (buyer_id is None or o.buyer_id == buyer_id)
            and (seller_id is None or o.seller_id == seller_id)
            and (status is None or o.status == status)
            and (cursor_id is None or o.id < cursor_id)
        ]
        return rows[:limit]

    async def list_closed_for_listing(self, db: object, listing_id: str) -> list[Order]:
        return [
            o for o in self.orders.values()
            if o.listing_id == listing_id and o.status in ("cancelled", "refunded")
        ]


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = fail

    async def notify(self, recipient_email: str, subject: str, body: str) -> None:
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append((recipient_email, subject, body))


async def fake_email_lookup(db: object, user_id: str) -> str | None:
    return f"{user_id}@example.com"
