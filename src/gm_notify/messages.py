"""Subject/body builders for marketplace notifications."""

from dataclasses import dataclass

from src.gm_common.money import money_to_display, quantity_to_display
from src.gm_listing.domain.models import Listing
from src.gm_order.domain.models import Order


@dataclass(frozen=True)
class Message:
    subject: str
    body: str


def order_placed_for_buyer(order: Order, listing_title: str) -> Message:
    return Message(
        subject=f"Order Confirmation - {order.id}",
        body=(
            f"Your order {order.id} for {quantity_to_display(order.quantity)} of "
            f"{listing_title} has been placed.\n"
            f"Total amount: {money_to_display(order.total_amount)}\n"
            f"Payment method: {order.payment_method}\n"
            "The seller will confirm your order shortly."
        ),
    )


def order_received_for_seller(order: Order, listing_title: str) -> Message:
    return Message(
        subject=f"New Order Received - {order.id}",
        body=(
            f"You have received order {order.id} for {quantity_to_display(order.quantity)} "
            f"of {listing_title}.\n"
            f"Total amount: {money_to_display(order.total_amount)}\n"
            f"Platform commission: {money_to_display(order.commission_amount)}\n"
            f"Your earnings: {money_to_display(order.net_earnings)}\n"
            "Please confirm the order."
        ),
    )


_STATUS_TEXT = {
    "confirmed": "has been confirmed by the farmer",
    "paid": "has been paid",
    "shipped": "has been shipped",
    "delivered": "has been delivered",
    "refunded": "has been refunded",
}


def order_status_changed(order: Order) -> Message:
    what = _STATUS_TEXT.get(order.status, f"is now {order.status}")
    return Message(
        subject=f"Order Update - {order.id}",
        body=f"Order {order.id} {what}.",
    )


def order_cancelled(order: Order) -> Message:
    reason = order.cancellation_reason or "not given"
    return Message(
        subject=f"Order Cancelled - {order.id}",
        body=f"Order {order.id} has been cancelled.\nReason: {reason}",
    )


def listing_approved(listing: Listing) -> Message:
    return Message(
        subject=f"Listing Approved - {listing.title}",
        body=(
            f"Your listing \"{listing.title}\" ({listing.id}) has been approved and is "
            "now visible to buyers."
        ),
    )


def listing_rejected(listing: Listing) -> Message:
    body = f"Your listing \"{listing.title}\" ({listing.id}) was not approved."
    if listing.admin_notes:
        body += f"\nReviewer notes: {listing.admin_notes}"
    return Message(subject=f"Listing Rejected - {listing.title}", body=body)
