"""Decimal arithmetic for amounts and grain quantities.

Grain is sold in fractional quintals, so quantities, prices and amounts are
all ``Decimal`` with two places. Never float: float inputs are converted via
``str`` so 333.33 stays 333.33.
"""

from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: Decimal | int | float | str) -> Decimal:
    """Round half-up to two decimal places."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def money_to_display(amount: Decimal) -> str:
    """Format for messages: Decimal('1234.5') -> '₹1,234.50', negatives keep the sign."""
    q = quantize_money(amount)
    if q < 0:
        return f"-₹{-q:,.2f}"
    return f"₹{q:,.2f}"


def quantity_to_display(quantity: Decimal) -> str:
    """Decimal('12.50') -> '12.5 quintals'."""
    normalized = to_decimal(quantity).normalize()
    text = f"{normalized:f}"
    return f"{text} quintals"
