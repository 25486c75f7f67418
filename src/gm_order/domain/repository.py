"""OrderRepository Protocol: interface contract for the persistence layer."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_order.domain.models import Order, Rating


class OrderRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, order: Order) -> None: ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def apply_transition(
        self, db: AsyncSession, order: Order, expected_status: str
    ) -> bool: ...

    async def save_rating(
        self, db: AsyncSession, order_id: str, slot: str, rating: Rating
    ) -> bool: ...

    async def list_orders(
        self,
        db: AsyncSession,
        buyer_id: str | None,
        seller_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...

    async def list_closed_for_listing(
        self, db: AsyncSession, listing_id: str
    ) -> list[Order]: ...
