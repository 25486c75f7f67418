"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  3xxx: Listing / inventory
  4xxx: Order
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class PhoneExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Mobile number already registered", 409)


class UnauthorizedError(AppError):
    """The caller's role (or lack of a stake in the resource) forbids the action."""

    def __init__(self, detail: str = "Not authorized to perform this action") -> None:
        super().__init__(1006, detail, 403)


# --- 3xxx: Listing / inventory ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3001, f"Listing not found: {listing_id}", 404)


class ListingNotApprovedError(AppError):
    def __init__(self, listing_id: str, status: str) -> None:
        super().__init__(
            3002, f"Listing {listing_id} is not available for order (status={status})", 400
        )


class InsufficientInventoryError(AppError):
    def __init__(self, requested: object, available: object) -> None:
        super().__init__(
            3003,
            f"Insufficient quantity available: requested {requested}, available {available}",
            400,
        )


class ListingExpiredError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3004, f"Listing {listing_id} has expired", 400)


class ListingHasActiveOrdersError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3005, f"Listing {listing_id} still has open orders", 409)


# --- 4xxx: Order ---

class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}", 404)


class NotCancellableError(AppError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(4006, f"Order {order_id} in status {status} cannot be cancelled", 400)


class NotDeliveredError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4007, f"Order {order_id} can only be rated once delivered", 400)


class InvalidTransitionError(AppError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(4010, f"Cannot move order from {current} to {target}", 400)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ValidationError(AppError):
    """Business-rule validation failure on otherwise well-formed input."""

    def __init__(self, detail: str) -> None:
        super().__init__(9003, detail, 400)
