"""Unit tests for the commission calculator."""

from decimal import Decimal

import pytest

from src.gm_common.errors import ValidationError
from src.gm_order.domain.commission import compute


class TestCompute:
    def test_default_five_percent(self) -> None:
        split = compute(Decimal("1000"))
        assert split.amount == Decimal("50.00")
        assert split.net_earnings == Decimal("950.00")

    def test_rounds_half_up(self) -> None:
        # 333.33 * 5% = 16.6665 -> 16.67
        split = compute(Decimal("333.33"), Decimal("5"))
        assert split.amount == Decimal("16.67")
        assert split.net_earnings == Decimal("316.66")

    def test_exact_half_cent_rounds_up(self) -> None:
        # 0.10 * 5% = 0.005 -> 0.01
        assert compute(Decimal("0.10"), Decimal("5")).amount == Decimal("0.01")

    def test_amount_plus_net_equals_total(self) -> None:
        for total in ("0", "1", "99.99", "12345.67", "250000"):
            split = compute(Decimal(total), Decimal("7.5"))
            assert split.amount + split.net_earnings == Decimal(total)

    def test_zero_percent(self) -> None:
        split = compute(Decimal("500"), Decimal("0"))
        assert split.amount == Decimal("0.00")
        assert split.net_earnings == Decimal("500")

    def test_accepts_int_and_str(self) -> None:
        assert compute(1000, "5").amount == Decimal("50.00")

    def test_deterministic(self) -> None:
        assert compute(Decimal("777.77")) == compute(Decimal("777.77"))

    @pytest.mark.parametrize("pct", ["-1", "100.01"])
    def test_percentage_out_of_range(self, pct: str) -> None:
        with pytest.raises(ValidationError):
            compute(Decimal("100"), Decimal(pct))

    def test_negative_total_rejected(self) -> None:
        with pytest.raises(ValidationError):
            compute(Decimal("-1"))
