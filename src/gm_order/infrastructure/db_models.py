"""ORM mirrors of ``orders`` and ``order_timeline`` (migrations 004 and 005)."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Numeric,
    SmallInteger,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.gm_common.database import Base
from src.gm_common.enums import OrderStatus

_STATUSES = ",".join(f"'{s.value}'" for s in OrderStatus)


class OrderORM(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
        CheckConstraint(
            f"status IN ({_STATUSES})",
            name="ck_orders_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False)
    listing_id: Mapped[str] = mapped_column(String(32), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    commission_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    delivery_type: Mapped[str] = mapped_column(String(20), nullable=False)
    address_name: Mapped[str] = mapped_column(String(100), nullable=False)
    address_phone: Mapped[str] = mapped_column(String(15), nullable=False)
    address_street: Mapped[str] = mapped_column(String(200), nullable=False)
    address_city: Mapped[str] = mapped_column(String(100), nullable=False)
    address_state: Mapped[str] = mapped_column(String(100), nullable=False)
    address_pincode: Mapped[str] = mapped_column(String(6), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    estimated_delivery_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    actual_delivery_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancellation_reason: Mapped[str | None] = mapped_column(String(200))
    refund_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    refund_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes_buyer: Mapped[str | None] = mapped_column(String(500))
    notes_farmer: Mapped[str | None] = mapped_column(String(500))
    notes_admin: Mapped[str | None] = mapped_column(String(500))
    buyer_rating_stars: Mapped[int | None] = mapped_column(SmallInteger)
    buyer_rating_review: Mapped[str | None] = mapped_column(String(500))
    buyer_rating_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    seller_rating_stars: Mapped[int | None] = mapped_column(SmallInteger)
    seller_rating_review: Mapped[str | None] = mapped_column(String(500))
    seller_rating_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class OrderTimelineORM(Base):
    __tablename__ = "order_timeline"
    __table_args__ = (UniqueConstraint("order_id", "seq", name="uq_order_timeline_seq"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(String(32), nullable=False)
    seq: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(String(300), nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
