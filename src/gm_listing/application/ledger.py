"""InventoryLedger: the only writer of a listing's available_quantity.

Reservations run the pure rules first (so callers get the precise error),
then the atomic conditional UPDATE, which is what actually guarantees no
oversell under concurrent orders. Releases are keyed on the order id and
are idempotent.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_common.datetime_utils import utc_now
from src.gm_common.errors import InsufficientInventoryError, ListingNotFoundError
from src.gm_listing.domain.inventory import can_reserve, reservation_error
from src.gm_listing.domain.models import Listing
from src.gm_listing.domain.repository import ListingRepositoryProtocol
from src.gm_listing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)


class InventoryLedger:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    can_reserve = staticmethod(can_reserve)

    async def reserve(
        self,
        db: AsyncSession,
        listing: Listing,
        quantity: Decimal,
        now: datetime | None = None,
    ) -> Listing:
        """Decrement available quantity or raise; returns the updated listing."""
        now = now or utc_now()
        error = reservation_error(listing, quantity, now)
        if error is not None:
            raise error

        updated = await self._repo.reserve_quantity(db, listing.id, quantity, now)
        if updated is None:
            # Lost a race: report against what is persisted now.
            current = await self._repo.get_by_id(db, listing.id)
            if current is None:
                raise ListingNotFoundError(listing.id)
            error = reservation_error(current, quantity, now)
            raise error or InsufficientInventoryError(quantity, current.available_quantity)

        logger.info(
            "Reserved %s of listing %s (available %s)",
            quantity, listing.id, updated.available_quantity,
        )
        return updated

    async def release(
        self, db: AsyncSession, listing_id: str, quantity: Decimal, order_id: str
    ) -> Listing:
        """Return an order's quantity to its listing, at most once per order."""
        updated = await self._repo.release_quantity(db, listing_id, quantity, order_id)
        if updated is not None:
            logger.info(
                "Released %s to listing %s for order %s (available %s)",
                quantity, listing_id, order_id, updated.available_quantity,
            )
            return updated

        current = await self._repo.get_by_id(db, listing_id)
        if current is None:
            raise ListingNotFoundError(listing_id)
        logger.info("Release for order %s already applied, skipping", order_id)
        return current
