"""Pydantic schemas and cursor utilities for gm_order API.

Request bodies accept both camelCase and snake_case keys.
Amounts and quantities are Decimals; the router dumps them as JSON strings.
"""

import base64
import json
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.gm_common.enums import DeliveryType, OrderStatus, PaymentMethod
from src.gm_common.money import money_to_display
from src.gm_order.domain.models import MAX_CANCELLATION_REASON, DeliveryAddress, Order, Rating

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: str) -> str:
    """Encode an order id into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> str | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return str(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeliveryAddressIn(_CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., pattern=r"^[6-9]\d{9}$", description="10-digit mobile number")
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., pattern=r"^[1-9][0-9]{5}$")

    def to_domain(self) -> DeliveryAddress:
        return DeliveryAddress(
            name=self.name,
            phone=self.phone,
            street=self.street,
            city=self.city,
            state=self.state,
            pincode=self.pincode,
        )


class CreateOrderRequest(_CamelModel):
    listing_id: str = Field(..., min_length=1, max_length=32)
    quantity: Decimal = Field(..., gt=0, decimal_places=2, description="Quintals")
    delivery_address: DeliveryAddressIn
    payment_method: PaymentMethod
    delivery_type: DeliveryType = DeliveryType.FARMER_DELIVERY
    notes: str | None = Field(None, max_length=500)


class UpdateStatusRequest(_CamelModel):
    status: OrderStatus
    notes: str | None = Field(None, max_length=500)


class CancelOrderRequest(_CamelModel):
    reason: str | None = Field(None, max_length=MAX_CANCELLATION_REASON)


class RateOrderRequest(_CamelModel):
    rating: int = Field(..., ge=1, le=5)
    review: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TimelineEntryOut(BaseModel):
    status: str
    timestamp: str
    description: str
    actor_id: str | None


class CommissionOut(BaseModel):
    percentage: Decimal
    amount: Decimal
    amount_display: str


class RatingOut(BaseModel):
    rating: int
    review: str | None
    rated_at: str

    @classmethod
    def from_domain(cls, rating: Rating | None) -> "RatingOut | None":
        if rating is None:
            return None
        return cls(rating=rating.stars, review=rating.review, rated_at=rating.rated_at.isoformat())


class DeliveryAddressOut(BaseModel):
    name: str
    phone: str
    street: str
    city: str
    state: str
    pincode: str


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    seller_id: str
    listing_id: str
    quantity: Decimal
    price_per_unit: Decimal
    total_amount: Decimal
    total_amount_display: str
    commission: CommissionOut
    net_earnings: Decimal
    status: str
    payment_method: str
    payment_status: str
    delivery_type: str
    delivery_address: DeliveryAddressOut
    estimated_delivery_date: str | None
    actual_delivery_date: str | None
    cancellation_reason: str | None
    refund_amount: Decimal | None
    refund_date: str | None
    notes: dict[str, str | None]
    buyer_rating: RatingOut | None
    seller_rating: RatingOut | None
    timeline: list[TimelineEntryOut]
    created_at: str | None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        address = order.delivery_address
        return cls(
            id=order.id,
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            listing_id=order.listing_id,
            quantity=order.quantity,
            price_per_unit=order.price_per_unit,
            total_amount=order.total_amount,
            total_amount_display=money_to_display(order.total_amount),
            commission=CommissionOut(
                percentage=order.commission_percentage,
                amount=order.commission_amount,
                amount_display=money_to_display(order.commission_amount),
            ),
            net_earnings=order.net_earnings,
            status=order.status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            delivery_type=order.delivery_type,
            delivery_address=DeliveryAddressOut(
                name=address.name,
                phone=address.phone,
                street=address.street,
                city=address.city,
                state=address.state,
                pincode=address.pincode,
            ),
            estimated_delivery_date=_iso(order.estimated_delivery_date),
            actual_delivery_date=_iso(order.actual_delivery_date),
            cancellation_reason=order.cancellation_reason,
            refund_amount=order.refund_amount,
            refund_date=_iso(order.refund_date),
            notes={
                "buyer": order.notes.buyer,
                "farmer": order.notes.farmer,
                "admin": order.notes.admin,
            },
            buyer_rating=RatingOut.from_domain(order.buyer_rating),
            seller_rating=RatingOut.from_domain(order.seller_rating),
            timeline=[
                TimelineEntryOut(
                    status=e.status,
                    timestamp=e.timestamp.isoformat(),
                    description=e.description,
                    actor_id=e.actor_id,
                )
                for e in order.timeline
            ],
            created_at=_iso(order.created_at),
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
