"""ListingRepository Protocol: interface contract for the persistence layer."""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_listing.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, listing: Listing) -> None: ...

    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def reserve_quantity(
        self, db: AsyncSession, listing_id: str, quantity: Decimal, now: datetime
    ) -> Listing | None: ...

    async def release_quantity(
        self, db: AsyncSession, listing_id: str, quantity: Decimal, order_id: str
    ) -> Listing | None: ...

    async def update_review_status(
        self,
        db: AsyncSession,
        listing_id: str,
        status: str,
        expected_statuses: list[str],
        admin_notes: str | None,
        approved_by: str | None,
    ) -> Listing | None: ...

    async def sum_active_order_quantity(self, db: AsyncSession, listing_id: str) -> Decimal: ...

    async def delete_if_no_active_orders(self, db: AsyncSession, listing_id: str) -> bool: ...
