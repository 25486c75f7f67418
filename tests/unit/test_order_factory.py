"""Unit tests for new_order: derived fields are computed, never taken from input."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from src.gm_common.errors import ValidationError
from src.gm_order.domain.factory import new_order
from tests.unit.fakes import ADDRESS, BUYER, FARMER, make_listing

T0 = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)


def _build(**kwargs: object):  # type: ignore[no-untyped-def]
    params: dict[str, object] = {
        "listing": make_listing(price_per_unit=Decimal("2500.00")),
        "buyer_id": BUYER.id,
        "quantity": Decimal("10"),
        "payment_method": "bank_transfer",
        "delivery_address": ADDRESS,
        "delivery_type": "farmer_delivery",
        "now": T0,
    }
    params.update(kwargs)
    return new_order(**params)  # type: ignore[arg-type]


class TestNewOrder:
    def test_total_is_quantity_times_price(self) -> None:
        order = _build()
        assert order.total_amount == Decimal("25000.00")
        assert order.price_per_unit == Decimal("2500.00")

    def test_fractional_quantity_rounds_half_up(self) -> None:
        order = _build(
            listing=make_listing(price_per_unit=Decimal("33.33")), quantity=Decimal("0.5")
        )
        # 16.665 -> 16.67
        assert order.total_amount == Decimal("16.67")

    def test_commission_frozen_at_creation(self) -> None:
        order = _build()
        assert order.commission_percentage == Decimal("5")
        assert order.commission_amount == Decimal("1250.00")
        assert order.net_earnings == Decimal("23750.00")

    def test_custom_commission_percentage(self) -> None:
        order = _build(commission_percentage=Decimal("2.5"))
        assert order.commission_amount == Decimal("625.00")

    def test_parties_come_from_listing_and_buyer(self) -> None:
        order = _build()
        assert order.buyer_id == BUYER.id
        assert order.seller_id == FARMER.id
        assert order.listing_id == "LST-1"

    def test_first_timeline_entry_is_pending(self) -> None:
        order = _build()
        assert order.status == "pending"
        assert order.payment_status == "pending"
        assert len(order.timeline) == 1
        assert order.timeline[0].status == "pending"
        assert order.timeline[0].timestamp == T0

    def test_estimated_delivery_default_seven_days(self) -> None:
        assert _build().estimated_delivery_date == T0 + timedelta(days=7)

    def test_buyer_pickup_has_no_estimated_delivery(self) -> None:
        assert _build(delivery_type="buyer_pickup").estimated_delivery_date is None

    def test_buyer_notes_kept(self) -> None:
        assert _build(buyer_notes="Call before delivery").notes.buyer == "Call before delivery"

    def test_ids_are_prefixed_and_unique(self) -> None:
        a, b = _build(), _build()
        assert a.id.startswith("ORD-")
        assert a.id != b.id

    def test_non_positive_quantity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _build(quantity=Decimal("0"))
