"""Listing domain model: pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.gm_common.datetime_utils import days_from_now, utc_now
from src.gm_common.enums import ListingStatus
from src.gm_common.errors import ValidationError
from src.gm_common.id_generator import generate_id


@dataclass
class Listing:
    id: str
    seller_id: str
    title: str
    grain_type: str
    description: str
    total_quantity: Decimal      # quintals, fixed at creation
    available_quantity: Decimal  # written only by the inventory ledger
    price_per_unit: Decimal      # per quintal
    minimum_order_quantity: Decimal
    status: str = ListingStatus.PENDING.value
    expires_at: datetime | None = None
    admin_notes: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def reserved_quantity(self) -> Decimal:
        return self.total_quantity - self.available_quantity

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at is not None and self.expires_at <= (now or utc_now())


def new_listing(
    seller_id: str,
    title: str,
    grain_type: str,
    description: str,
    total_quantity: Decimal,
    price_per_unit: Decimal,
    minimum_order_quantity: Decimal,
    ttl_days: int,
    now: datetime | None = None,
) -> Listing:
    """Build a fresh ``pending`` listing with its full quantity available."""
    if total_quantity <= 0:
        raise ValidationError("total_quantity must be positive")
    if price_per_unit <= 0:
        raise ValidationError("price_per_unit must be positive")
    if minimum_order_quantity <= 0 or minimum_order_quantity > total_quantity:
        raise ValidationError("minimum_order_quantity must be positive and <= total_quantity")
    created = now or utc_now()
    return Listing(
        id=generate_id("LST"),
        seller_id=seller_id,
        title=title,
        grain_type=grain_type,
        description=description,
        total_quantity=total_quantity,
        available_quantity=total_quantity,
        price_per_unit=price_per_unit,
        minimum_order_quantity=minimum_order_quantity,
        status=ListingStatus.PENDING.value,
        expires_at=days_from_now(ttl_days, created),
        created_at=created,
        updated_at=created,
    )
