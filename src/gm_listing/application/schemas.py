"""Pydantic schemas for gm_listing API.

Request bodies accept both camelCase and snake_case keys.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.gm_common.enums import GrainType
from src.gm_common.money import money_to_display, quantity_to_display
from src.gm_listing.domain.models import Listing

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateListingRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=3, max_length=100)
    grain_type: GrainType
    description: str = Field(..., min_length=1, max_length=2000)
    total_quantity: Decimal = Field(..., gt=0, decimal_places=2, description="Quintals")
    price_per_unit: Decimal = Field(..., gt=0, decimal_places=2, description="Price per quintal")
    minimum_order_quantity: Decimal = Field(Decimal("1"), gt=0, decimal_places=2)


class ReviewListingRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    admin_notes: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    id: str
    seller_id: str
    title: str
    grain_type: str
    description: str
    total_quantity: Decimal
    available_quantity: Decimal
    available_quantity_display: str
    price_per_unit: Decimal
    price_per_unit_display: str
    minimum_order_quantity: Decimal
    status: str
    expires_at: str | None
    admin_notes: str | None
    approved_by: str | None
    approved_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            seller_id=listing.seller_id,
            title=listing.title,
            grain_type=listing.grain_type,
            description=listing.description,
            total_quantity=listing.total_quantity,
            available_quantity=listing.available_quantity,
            available_quantity_display=quantity_to_display(listing.available_quantity),
            price_per_unit=listing.price_per_unit,
            price_per_unit_display=money_to_display(listing.price_per_unit),
            minimum_order_quantity=listing.minimum_order_quantity,
            status=listing.status,
            expires_at=listing.expires_at.isoformat() if listing.expires_at else None,
            admin_notes=listing.admin_notes,
            approved_by=listing.approved_by,
            approved_at=listing.approved_at.isoformat() if listing.approved_at else None,
            created_at=listing.created_at.isoformat() if listing.created_at else None,
        )


class DeleteListingResponse(BaseModel):
    listing_id: str
    deleted: bool = True
