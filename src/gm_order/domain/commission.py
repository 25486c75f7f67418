"""Commission split between the platform and the seller.

amount = round_half_up(total * percentage / 100, 2); the seller keeps the rest.
Computed once when the order is built and stored; never recomputed.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.gm_common.errors import ValidationError
from src.gm_common.money import quantize_money, to_decimal

DEFAULT_PERCENTAGE = Decimal("5")


@dataclass(frozen=True)
class CommissionSplit:
    percentage: Decimal
    amount: Decimal
    net_earnings: Decimal


def compute(
    total_amount: Decimal | int | str, percentage: Decimal | int | str = DEFAULT_PERCENTAGE
) -> CommissionSplit:
    total = to_decimal(total_amount)
    pct = to_decimal(percentage)
    if total < 0:
        raise ValidationError("total_amount must not be negative")
    if pct < 0 or pct > 100:
        raise ValidationError("commission percentage must be between 0 and 100")
    amount = quantize_money(total * pct / Decimal(100))
    return CommissionSplit(percentage=pct, amount=amount, net_earnings=total - amount)
