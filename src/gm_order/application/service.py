"""OrderApplicationService: order lifecycle orchestration.

Each write operation is one transaction owned here:
  create_order   reserve inventory + insert order and first timeline entry
  update_status  conditional status UPDATE + timeline entry (+ release on refund)
  cancel_order   conditional status UPDATE + timeline entry + release
  rate           conditional rating UPDATE (delivered orders only)

Notifications go out after commit and never affect the outcome.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.gm_common.actor import Actor
from src.gm_common.datetime_utils import utc_now
from src.gm_common.enums import ListingStatus, OrderStatus, Role
from src.gm_common.errors import (
    InvalidTransitionError,
    ListingNotApprovedError,
    ListingNotFoundError,
    NotDeliveredError,
    OrderNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from src.gm_gateway.user.service import get_user_email
from src.gm_listing.application.ledger import InventoryLedger
from src.gm_listing.domain.repository import ListingRepositoryProtocol
from src.gm_listing.infrastructure.persistence import ListingRepository
from src.gm_notify import messages
from src.gm_notify.messages import Message
from src.gm_notify.notifier import Notifier, get_notifier, notify_safely
from src.gm_order.application.cancellation import CancellationHandler
from src.gm_order.application.schemas import (
    CreateOrderRequest,
    OrderListResponse,
    OrderResponse,
    cursor_decode,
    cursor_encode,
)
from src.gm_order.domain.factory import new_order
from src.gm_order.domain.models import Order, Rating
from src.gm_order.domain.repository import OrderRepositoryProtocol
from src.gm_order.domain.state_machine import transition
from src.gm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)

EmailLookup = Callable[[AsyncSession, str], Awaitable[str | None]]


class OrderApplicationService:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        notifier: Notifier | None = None,
        email_lookup: EmailLookup | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._listing_repo: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._ledger = InventoryLedger(self._listing_repo)
        self._cancellation = CancellationHandler(self._repo, self._ledger)
        self._notifier = notifier
        self._email_lookup: EmailLookup = email_lookup or get_user_email

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, actor: Actor, req: CreateOrderRequest
    ) -> OrderResponse:
        if actor.role not in (Role.BUYER, Role.ADMIN):
            raise UnauthorizedError("Only buyers can place orders")

        listing = await self._listing_repo.get_by_id(db, req.listing_id)
        if listing is None:
            raise ListingNotFoundError(req.listing_id)
        if listing.status != ListingStatus.APPROVED.value:
            raise ListingNotApprovedError(listing.id, listing.status)
        if listing.seller_id == actor.id:
            raise ValidationError("Cannot order from your own listing")

        now = utc_now()
        try:
            await self._ledger.reserve(db, listing, req.quantity, now)
            order = new_order(
                listing=listing,
                buyer_id=actor.id,
                quantity=req.quantity,
                payment_method=req.payment_method.value,
                delivery_address=req.delivery_address.to_domain(),
                delivery_type=req.delivery_type.value,
                buyer_notes=req.notes,
                commission_percentage=Decimal(settings.COMMISSION_PERCENTAGE),
                estimated_delivery_days=settings.ESTIMATED_DELIVERY_DAYS,
                now=now,
            )
            await self._repo.create(db, order)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s created: buyer=%s listing=%s quantity=%s total=%s",
            order.id, order.buyer_id, order.listing_id, order.quantity, order.total_amount,
        )
        await self._send(db, order.buyer_id, messages.order_placed_for_buyer(order, listing.title))
        await self._send(
            db, order.seller_id, messages.order_received_for_seller(order, listing.title)
        )
        return OrderResponse.from_domain(order)

    async def update_status(
        self,
        db: AsyncSession,
        actor: Actor,
        order_id: str,
        target: str,
        notes: str | None = None,
    ) -> OrderResponse:
        order = await self._get(db, order_id)
        if notes:
            order = replace(order, notes=replace(order.notes, **{actor.role.value: notes}))
        if target == OrderStatus.CANCELLED.value:
            # the full note stays in the caller's notes slot
            return await self._cancel(db, actor, order, notes)

        updated = transition(order, target, actor)

        try:
            if not await self._repo.apply_transition(db, updated, order.status):
                raise InvalidTransitionError(order.status, target)
            if target == OrderStatus.REFUNDED.value:
                await self._cancellation.restore_inventory(db, updated)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Order %s: %s -> %s by %s", order.id, order.status, target, actor.id)
        message = messages.order_status_changed(updated)
        for user_id in _counterparties(updated, actor):
            await self._send(db, user_id, message)
        return OrderResponse.from_domain(updated)

    async def cancel_order(
        self, db: AsyncSession, actor: Actor, order_id: str, reason: str | None = None
    ) -> OrderResponse:
        order = await self._get(db, order_id)
        return await self._cancel(db, actor, order, reason)

    async def rate(
        self,
        db: AsyncSession,
        actor: Actor,
        order_id: str,
        stars: int,
        review: str | None = None,
    ) -> OrderResponse:
        """Record the caller's rating; buyer and seller each own one slot."""
        order = await self._get(db, order_id)
        if actor.id == order.buyer_id:
            slot = "buyer_rating"
        elif actor.id == order.seller_id:
            slot = "seller_rating"
        else:
            raise UnauthorizedError("Only the buyer or seller can rate this order")
        if order.status != OrderStatus.DELIVERED.value:
            raise NotDeliveredError(order.id)
        if not 1 <= stars <= 5:
            raise ValidationError("rating must be between 1 and 5")

        rating = Rating(stars=stars, review=review, rated_at=utc_now())
        try:
            if not await self._repo.save_rating(db, order.id, slot, rating):
                raise NotDeliveredError(order.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Order %s rated %d by %s", order.id, stars, actor.id)
        return OrderResponse.from_domain(replace(order, **{slot: rating}))

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    async def get_order(self, db: AsyncSession, actor: Actor, order_id: str) -> OrderResponse:
        order = await self._get(db, order_id)
        if not actor.is_admin and not order.is_party(actor.id):
            raise UnauthorizedError("Not a party to this order")
        return OrderResponse.from_domain(order)

    async def list_orders(
        self,
        db: AsyncSession,
        actor: Actor,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> OrderListResponse:
        buyer_id = actor.id if actor.role == Role.BUYER else None
        seller_id = actor.id if actor.role == Role.FARMER else None
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        orders = await self._repo.list_orders(
            db, buyer_id, seller_id, status, cursor_decode(cursor), limit + 1
        )
        has_more = len(orders) > limit
        page = orders[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _get(self, db: AsyncSession, order_id: str) -> Order:
        order = await self._repo.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _cancel(
        self, db: AsyncSession, actor: Actor, order: Order, reason: str | None
    ) -> OrderResponse:
        try:
            cancelled = await self._cancellation.cancel(db, order, reason, actor)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        message = messages.order_cancelled(cancelled)
        await self._send(db, cancelled.buyer_id, message)
        await self._send(db, cancelled.seller_id, message)
        return OrderResponse.from_domain(cancelled)

    async def _send(self, db: AsyncSession, user_id: str, message: Message) -> None:
        try:
            email = await self._email_lookup(db, user_id)
        except Exception:
            logger.exception("Could not resolve email for user %s", user_id)
            return
        if not email:
            logger.warning("No email on file for user %s, skipping notification", user_id)
            return
        if self._notifier is None:
            self._notifier = get_notifier()
        await notify_safely(self._notifier, email, message)


def _counterparties(order: Order, actor: Actor) -> list[str]:
    """Who hears about a status change: the other party, or both for an admin."""
    if actor.id == order.buyer_id:
        return [order.seller_id]
    if actor.id == order.seller_id:
        return [order.buyer_id]
    return [order.buyer_id, order.seller_id]
