"""Order lifecycle state machine.

    pending -> confirmed -> paid -> shipped -> delivered
    pending | confirmed -> cancelled
    any non-terminal    -> refunded

Who may request which target is decided by PERMISSION_MATRIX alone; buyers
and farmers must also be the matching party of the order. ``authorize`` is
checked before the graph, so a forbidden actor gets UnauthorizedError even
for a transition that would also be invalid.
"""

from dataclasses import replace
from datetime import datetime

from src.gm_common.actor import Actor
from src.gm_common.datetime_utils import utc_now
from src.gm_common.enums import OrderStatus, PaymentStatus, Role
from src.gm_common.errors import InvalidTransitionError, UnauthorizedError
from src.gm_order.domain.models import Order

_S = OrderStatus

CANCELLABLE_STATUSES = frozenset({_S.PENDING.value, _S.CONFIRMED.value})

TRANSITIONS: dict[str, frozenset[str]] = {
    _S.PENDING.value: frozenset({_S.CONFIRMED.value, _S.CANCELLED.value, _S.REFUNDED.value}),
    _S.CONFIRMED.value: frozenset({_S.PAID.value, _S.CANCELLED.value, _S.REFUNDED.value}),
    _S.PAID.value: frozenset({_S.SHIPPED.value, _S.REFUNDED.value}),
    _S.SHIPPED.value: frozenset({_S.DELIVERED.value, _S.REFUNDED.value}),
    _S.DELIVERED.value: frozenset(),
    _S.CANCELLED.value: frozenset(),
    _S.REFUNDED.value: frozenset(),
}

_ALL_TARGETS = frozenset(s.value for s in OrderStatus)

PERMISSION_MATRIX: dict[Role, frozenset[str]] = {
    Role.ADMIN: _ALL_TARGETS,
    Role.FARMER: frozenset(
        {_S.CONFIRMED.value, _S.SHIPPED.value, _S.DELIVERED.value, _S.CANCELLED.value}
    ),
    Role.BUYER: frozenset({_S.PAID.value, _S.CANCELLED.value}),
}


def can_cancel(order: Order) -> bool:
    return order.status in CANCELLABLE_STATUSES


def is_allowed(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def authorize(order: Order, target: str, actor: Actor) -> None:
    """Raise UnauthorizedError unless ``actor`` may request ``target`` on ``order``."""
    if target not in PERMISSION_MATRIX.get(actor.role, frozenset()):
        raise UnauthorizedError(f"Role {actor.role.value} cannot set status {target}")
    if actor.role == Role.BUYER and actor.id != order.buyer_id:
        raise UnauthorizedError("Not the buyer of this order")
    if actor.role == Role.FARMER and actor.id != order.seller_id:
        raise UnauthorizedError("Not the seller of this order")


def transition(
    order: Order,
    target: str,
    actor: Actor,
    description: str | None = None,
    now: datetime | None = None,
) -> Order:
    """Return ``order`` moved to ``target`` with one new timeline entry.

    The input order is not modified.
    """
    authorize(order, target, actor)
    if not is_allowed(order.status, target):
        raise InvalidTransitionError(order.status, target)

    now = now or utc_now()
    timeline = order.timeline.append(
        target, now, description or f"Order status changed to {target}", actor_id=actor.id
    )
    changes: dict[str, object] = {"status": target, "timeline": timeline, "updated_at": now}

    if target == _S.DELIVERED.value:
        changes["actual_delivery_date"] = now
    elif target == _S.PAID.value:
        changes["payment_status"] = PaymentStatus.PAID.value
    elif target == _S.REFUNDED.value:
        changes["payment_status"] = PaymentStatus.REFUNDED.value
        changes["refund_amount"] = order.total_amount
        changes["refund_date"] = now

    return replace(order, **changes)  # type: ignore[arg-type]
