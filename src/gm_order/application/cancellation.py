"""CancellationHandler: cancel an order and give its quantity back.

Runs inside the caller's transaction: the conditional order UPDATE and the
inventory release either both commit or both roll back. The release is
keyed on the order id, so ``restore_inventory`` may be re-run safely.
"""

import logging
from dataclasses import replace
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_common.actor import Actor
from src.gm_common.enums import OrderStatus
from src.gm_common.errors import (
    InvalidTransitionError,
    NotCancellableError,
    UnauthorizedError,
)
from src.gm_listing.application.ledger import InventoryLedger
from src.gm_listing.domain.models import Listing
from src.gm_order.domain.models import MAX_CANCELLATION_REASON, Order
from src.gm_order.domain.repository import OrderRepositoryProtocol
from src.gm_order.domain.state_machine import can_cancel, transition
from src.gm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class CancellationHandler:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        ledger: InventoryLedger | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._ledger = ledger or InventoryLedger()

    async def cancel(
        self,
        db: AsyncSession,
        order: Order,
        reason: str | None,
        actor: Actor,
        now: datetime | None = None,
    ) -> Order:
        """Cancel ``order`` for ``actor`` and release its quantity.

        A blank reason becomes "Cancelled by <role>"; longer reasons are cut
        to MAX_CANCELLATION_REASON characters.
        """
        if not actor.is_admin and not order.is_party(actor.id):
            raise UnauthorizedError("Not a party to this order")
        if not can_cancel(order):
            raise NotCancellableError(order.id, order.status)

        reason = (reason or "").strip()[:MAX_CANCELLATION_REASON]
        if not reason:
            reason = f"Cancelled by {actor.role.value}"
        cancelled = transition(
            order, OrderStatus.CANCELLED.value, actor, f"Order cancelled: {reason}", now
        )
        cancelled = replace(cancelled, cancellation_reason=reason)

        if not await self._repo.apply_transition(db, cancelled, order.status):
            raise InvalidTransitionError(order.status, OrderStatus.CANCELLED.value)
        await self.restore_inventory(db, cancelled)
        logger.info("Order %s cancelled by %s: %s", order.id, actor.id, reason)
        return cancelled

    async def restore_inventory(self, db: AsyncSession, order: Order) -> Listing:
        """Return ``order.quantity`` to its listing (no-op if already returned).

        Only a cancelled or refunded order gives its quantity back.
        """
        if order.holds_inventory:
            raise InvalidTransitionError(order.status, "inventory release")
        return await self._ledger.release(db, order.listing_id, order.quantity, order.id)
