"""new_order: the single place an Order's derived fields are computed."""

from datetime import datetime
from decimal import Decimal

from src.gm_common.datetime_utils import days_from_now, utc_now
from src.gm_common.enums import DeliveryType, OrderStatus, PaymentStatus
from src.gm_common.errors import ValidationError
from src.gm_common.id_generator import generate_id
from src.gm_common.money import quantize_money
from src.gm_listing.domain.models import Listing
from src.gm_order.domain import commission
from src.gm_order.domain.models import DeliveryAddress, Order, OrderNotes
from src.gm_order.domain.timeline import Timeline


def new_order(
    listing: Listing,
    buyer_id: str,
    quantity: Decimal,
    payment_method: str,
    delivery_address: DeliveryAddress,
    delivery_type: str,
    buyer_notes: str | None = None,
    commission_percentage: Decimal = commission.DEFAULT_PERCENTAGE,
    estimated_delivery_days: int = 7,
    now: datetime | None = None,
) -> Order:
    """Build a ``pending`` order against ``listing`` at the listing's current price.

    total_amount and commission are derived here from quantity and the price
    snapshot; nothing the caller passes can override them.
    """
    if quantity <= 0:
        raise ValidationError("quantity must be positive")
    created = now or utc_now()
    total = quantize_money(quantity * listing.price_per_unit)
    split = commission.compute(total, commission_percentage)

    estimated = None
    if delivery_type != DeliveryType.BUYER_PICKUP.value:
        estimated = days_from_now(estimated_delivery_days, created)

    return Order(
        id=generate_id("ORD"),
        buyer_id=buyer_id,
        seller_id=listing.seller_id,
        listing_id=listing.id,
        quantity=quantity,
        price_per_unit=listing.price_per_unit,
        total_amount=total,
        commission_percentage=split.percentage,
        commission_amount=split.amount,
        payment_method=payment_method,
        delivery_address=delivery_address,
        delivery_type=delivery_type,
        status=OrderStatus.PENDING.value,
        payment_status=PaymentStatus.PENDING.value,
        timeline=Timeline().append(
            OrderStatus.PENDING.value, created, "Order placed", actor_id=buyer_id
        ),
        estimated_delivery_date=estimated,
        notes=OrderNotes(buyer=buyer_notes),
        created_at=created,
        updated_at=created,
    )
