"""Inventory rules for a listing's available quantity.

Pure functions over ``Listing``; the atomic SQL in the listing repository
applies exactly the same conditions against persisted state.

Invariant: 0 <= available_quantity <= total_quantity.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from src.gm_common.datetime_utils import utc_now
from src.gm_common.enums import ListingStatus
from src.gm_common.errors import (
    AppError,
    InsufficientInventoryError,
    ListingExpiredError,
    ListingNotApprovedError,
    ValidationError,
)
from src.gm_listing.domain.models import Listing


def can_reserve(listing: Listing, requested_quantity: Decimal, now: datetime | None = None) -> bool:
    return reservation_error(listing, requested_quantity, now) is None


def reservation_error(
    listing: Listing, requested_quantity: Decimal, now: datetime | None = None
) -> AppError | None:
    """Return the first rule ``requested_quantity`` breaks, or None if reservable."""
    if listing.status != ListingStatus.APPROVED.value:
        return ListingNotApprovedError(listing.id, listing.status)
    if listing.is_expired(now or utc_now()):
        return ListingExpiredError(listing.id)
    if requested_quantity <= 0:
        return ValidationError("quantity must be positive")
    if requested_quantity < listing.minimum_order_quantity:
        return ValidationError(
            f"Minimum order quantity is {listing.minimum_order_quantity}, got {requested_quantity}"
        )
    if requested_quantity > listing.available_quantity:
        return InsufficientInventoryError(requested_quantity, listing.available_quantity)
    return None


def apply_release(listing: Listing, quantity: Decimal) -> Listing:
    """In-memory increment, clamped at total_quantity."""
    if quantity <= 0:
        raise ValidationError("quantity must be positive")
    restored = min(listing.total_quantity, listing.available_quantity + quantity)
    return replace(listing, available_quantity=restored)
