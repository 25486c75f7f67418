"""Tests for gm_common.errors: codes and HTTP statuses are part of the API."""

from decimal import Decimal

import pytest

from src.gm_common.errors import (
    AppError,
    InsufficientInventoryError,
    InvalidTransitionError,
    ListingHasActiveOrdersError,
    ListingNotFoundError,
    NotCancellableError,
    NotDeliveredError,
    OrderNotFoundError,
    PhoneExistsError,
    RateLimitError,
    UnauthorizedError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error", "code", "status"),
    [
        (UnauthorizedError(), 1006, 403),
        (PhoneExistsError(), 1007, 409),
        (ListingNotFoundError("LST-1"), 3001, 404),
        (InsufficientInventoryError(Decimal("30"), Decimal("10")), 3003, 400),
        (ListingHasActiveOrdersError("LST-1"), 3005, 409),
        (OrderNotFoundError("ORD-1"), 4004, 404),
        (NotCancellableError("ORD-1", "shipped"), 4006, 400),
        (NotDeliveredError("ORD-1"), 4007, 400),
        (InvalidTransitionError("pending", "shipped"), 4010, 400),
        (RateLimitError(), 9001, 429),
        (ValidationError("bad"), 9003, 400),
    ],
)
def test_code_and_status(error: AppError, code: int, status: int) -> None:
    assert error.code == code
    assert error.http_status == status
    assert str(error) == error.message


def test_messages_carry_context() -> None:
    assert "requested 30, available 10" in InsufficientInventoryError(
        Decimal("30"), Decimal("10")
    ).message
    assert "shipped" in NotCancellableError("ORD-1", "shipped").message
