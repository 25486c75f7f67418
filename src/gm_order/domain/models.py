"""Order domain model: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.gm_common.enums import OrderStatus, PaymentStatus
from src.gm_order.domain.timeline import Timeline

# orders.cancellation_reason is VARCHAR(200)
MAX_CANCELLATION_REASON = 200


@dataclass(frozen=True)
class DeliveryAddress:
    name: str
    phone: str
    street: str
    city: str
    state: str
    pincode: str


@dataclass(frozen=True)
class Rating:
    stars: int  # 1..5
    review: str | None
    rated_at: datetime


@dataclass(frozen=True)
class OrderNotes:
    buyer: str | None = None
    farmer: str | None = None
    admin: str | None = None


@dataclass
class Order:
    id: str
    buyer_id: str
    seller_id: str
    listing_id: str
    quantity: Decimal
    price_per_unit: Decimal           # snapshot of the listing price at creation
    total_amount: Decimal             # quantity * price_per_unit, set by new_order
    commission_percentage: Decimal
    commission_amount: Decimal        # frozen at creation
    payment_method: str
    delivery_address: DeliveryAddress
    delivery_type: str
    status: str = OrderStatus.PENDING.value
    payment_status: str = PaymentStatus.PENDING.value
    timeline: Timeline = field(default_factory=Timeline)
    estimated_delivery_date: datetime | None = None
    actual_delivery_date: datetime | None = None
    cancellation_reason: str | None = None
    refund_amount: Decimal | None = None
    refund_date: datetime | None = None
    notes: OrderNotes = field(default_factory=OrderNotes)
    buyer_rating: Rating | None = None
    seller_rating: Rating | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def net_earnings(self) -> Decimal:
        return self.total_amount - self.commission_amount

    @property
    def holds_inventory(self) -> bool:
        """True while the ordered quantity is still reserved on the listing."""
        return self.status not in (OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value)

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)
