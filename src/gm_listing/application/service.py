"""ListingApplicationService: farmer-facing listing operations.

Create and delete own their transaction; get is read-only.
Review (approve/reject) lives in gm_admin.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.gm_common.actor import Actor
from src.gm_common.enums import Role
from src.gm_common.errors import (
    ListingHasActiveOrdersError,
    ListingNotFoundError,
    UnauthorizedError,
)
from src.gm_listing.application.schemas import (
    CreateListingRequest,
    DeleteListingResponse,
    ListingResponse,
)
from src.gm_listing.domain.models import new_listing
from src.gm_listing.domain.repository import ListingRepositoryProtocol
from src.gm_listing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)


class ListingApplicationService:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    async def create_listing(
        self, db: AsyncSession, actor: Actor, req: CreateListingRequest
    ) -> ListingResponse:
        if actor.role != Role.FARMER:
            raise UnauthorizedError("Only farmers can create listings")
        listing = new_listing(
            seller_id=actor.id,
            title=req.title,
            grain_type=req.grain_type.value,
            description=req.description,
            total_quantity=req.total_quantity,
            price_per_unit=req.price_per_unit,
            minimum_order_quantity=req.minimum_order_quantity,
            ttl_days=settings.LISTING_TTL_DAYS,
        )
        try:
            await self._repo.create(db, listing)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing %s created by %s", listing.id, actor.id)
        return ListingResponse.from_domain(listing)

    async def get_listing(self, db: AsyncSession, listing_id: str) -> ListingResponse:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingResponse.from_domain(listing)

    async def delete_listing(
        self, db: AsyncSession, actor: Actor, listing_id: str
    ) -> DeleteListingResponse:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if not actor.is_admin and listing.seller_id != actor.id:
            raise UnauthorizedError("Only the listing owner can delete it")
        try:
            deleted = await self._repo.delete_if_no_active_orders(db, listing_id)
            if not deleted:
                raise ListingHasActiveOrdersError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing %s deleted by %s", listing_id, actor.id)
        return DeleteListingResponse(listing_id=listing_id)
