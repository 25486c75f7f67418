"""Admin application service: listing review and inventory checks."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_common.actor import Actor
from src.gm_common.enums import ListingStatus
from src.gm_common.errors import InvalidTransitionError, ListingNotFoundError
from src.gm_gateway.user.service import get_user_email
from src.gm_listing.application.ledger import InventoryLedger
from src.gm_listing.application.schemas import ListingResponse
from src.gm_listing.domain.models import Listing
from src.gm_listing.domain.repository import ListingRepositoryProtocol
from src.gm_listing.infrastructure.persistence import ListingRepository
from src.gm_notify import messages
from src.gm_notify.notifier import Notifier, get_notifier, notify_safely
from src.gm_order.application.service import EmailLookup
from src.gm_order.domain.repository import OrderRepositoryProtocol
from src.gm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)

# target status -> statuses it may be reached from
_REVIEW_FROM: dict[str, list[str]] = {
    ListingStatus.APPROVED.value: [ListingStatus.PENDING.value, ListingStatus.REJECTED.value],
    ListingStatus.REJECTED.value: [ListingStatus.PENDING.value, ListingStatus.APPROVED.value],
}


class AdminService:
    def __init__(
        self,
        listing_repo: ListingRepositoryProtocol | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
        notifier: Notifier | None = None,
        email_lookup: EmailLookup | None = None,
    ) -> None:
        self._listing_repo: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._order_repo: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._ledger = InventoryLedger(self._listing_repo)
        self._notifier = notifier
        self._email_lookup: EmailLookup = email_lookup or get_user_email

    async def approve_listing(
        self, db: AsyncSession, admin: Actor, listing_id: str, admin_notes: str | None
    ) -> ListingResponse:
        listing = await self._review(
            db, admin, listing_id, ListingStatus.APPROVED.value, admin_notes
        )
        await self._notify_seller(db, listing, messages.listing_approved(listing))
        return ListingResponse.from_domain(listing)

    async def reject_listing(
        self, db: AsyncSession, admin: Actor, listing_id: str, admin_notes: str | None
    ) -> ListingResponse:
        listing = await self._review(
            db, admin, listing_id, ListingStatus.REJECTED.value, admin_notes
        )
        await self._notify_seller(db, listing, messages.listing_rejected(listing))
        return ListingResponse.from_domain(listing)

    async def verify_listing_inventory(self, db: AsyncSession, listing_id: str) -> dict[str, Any]:
        """Compare reserved quantity with the quantity held by open orders."""
        listing = await self._listing_repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        held = await self._listing_repo.sum_active_order_quantity(db, listing_id)
        consistent = listing.reserved_quantity == held
        if not consistent:
            logger.warning(
                "Inventory drift on listing %s: reserved=%s held_by_orders=%s",
                listing_id, listing.reserved_quantity, held,
            )
        return {
            "listing_id": listing_id,
            "total_quantity": str(listing.total_quantity),
            "available_quantity": str(listing.available_quantity),
            "reserved_quantity": str(listing.reserved_quantity),
            "held_by_active_orders": str(held),
            "consistent": consistent,
        }

    async def reconcile_listing_inventory(
        self, db: AsyncSession, listing_id: str
    ) -> dict[str, Any]:
        """Re-apply releases for every cancelled/refunded order of a listing.

        Releases already recorded are skipped, so this only repairs orders
        whose release never landed.
        """
        listing = await self._listing_repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        try:
            closed = await self._order_repo.list_closed_for_listing(db, listing_id)
            before = listing.available_quantity
            for order in closed:
                listing = await self._ledger.release(db, listing_id, order.quantity, order.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        restored = listing.available_quantity - before
        logger.info(
            "Reconciled listing %s: %d closed orders checked, %s restored",
            listing_id, len(closed), restored,
        )
        return {
            "listing_id": listing_id,
            "orders_checked": len(closed),
            "quantity_restored": str(restored),
            "available_quantity": str(listing.available_quantity),
        }

    # ------------------------------------------------------------------

    async def _review(
        self,
        db: AsyncSession,
        admin: Actor,
        listing_id: str,
        target: str,
        admin_notes: str | None,
    ) -> Listing:
        current = await self._listing_repo.get_by_id(db, listing_id)
        if current is None:
            raise ListingNotFoundError(listing_id)
        try:
            listing = await self._listing_repo.update_review_status(
                db,
                listing_id,
                target,
                _REVIEW_FROM[target],
                admin_notes,
                admin.id if target == ListingStatus.APPROVED.value else None,
            )
            if listing is None:
                raise InvalidTransitionError(current.status, target)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing %s %s by admin %s", listing_id, target, admin.id)
        return listing

    async def _notify_seller(
        self, db: AsyncSession, listing: Listing, message: messages.Message
    ) -> None:
        try:
            email = await self._email_lookup(db, listing.seller_id)
        except Exception:
            logger.exception("Could not resolve email for user %s", listing.seller_id)
            return
        if not email:
            return
        if self._notifier is None:
            self._notifier = get_notifier()
        await notify_safely(self._notifier, email, message)
