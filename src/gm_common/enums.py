"""Global enums: values must match the DB CHECK constraints exactly."""

from enum import Enum


class Role(str, Enum):
    BUYER = "buyer"
    FARMER = "farmer"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Accept ``seller`` as an alias of ``farmer``."""
        if value == "seller":
            return cls.FARMER
        return cls(value)


class ListingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SOLD = "sold"
    EXPIRED = "expired"


class GrainType(str, Enum):
    WHEAT = "wheat"
    RICE = "rice"
    CORN = "corn"
    BARLEY = "barley"
    MILLET = "millet"
    SORGHUM = "sorghum"
    OATS = "oats"
    QUINOA = "quinoa"
    OTHER = "other"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CARD = "card"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class DeliveryType(str, Enum):
    FARMER_DELIVERY = "farmer_delivery"
    BUYER_PICKUP = "buyer_pickup"
    THIRD_PARTY = "third_party"
