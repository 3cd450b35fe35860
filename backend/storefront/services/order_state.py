"""
Order lifecycle state machine.

Payment status and fulfillment status are tracked separately, but fulfillment
can only move forward once payment is verified:

    payment:      pending -> verified | rejected
    fulfillment:  pending -> processing -> shipped -> delivered
                  pending | processing -> cancelled

Every accepted transition appends one entry to `status_history`; rejected
transitions raise InvalidTransitionError and leave the order untouched.
Re-applying the state an order is already in is a no-op and returns False.

The functions here do no I/O. They operate on Order instances (or anything
with the same attributes) and are wrapped by OrderService for persistence.
"""
import hmac
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from storefront.core.errors import InvalidTransitionError, ValidationError
from storefront.models.order import OrderStatus, PaymentStatus

FULFILLMENT_SEQUENCE: tuple[str, ...] = (
    OrderStatus.PENDING.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
)
CANCELLABLE_STATES = frozenset({OrderStatus.PENDING.value, OrderStatus.PROCESSING.value})

DEFAULT_NOTES = {
    PaymentStatus.VERIFIED.value: "Payment verified",
    PaymentStatus.REJECTED.value: "Payment rejected",
    OrderStatus.PROCESSING.value: "Order is being processed",
    OrderStatus.SHIPPED.value: "Order shipped",
    OrderStatus.DELIVERED.value: "Order delivered",
    OrderStatus.CANCELLED.value: "Order cancelled",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def history_entry(status: str, note: Optional[str] = None, at: Optional[datetime] = None) -> dict[str, Any]:
    """Build one status history entry as stored in the JSON column."""
    entry: dict[str, Any] = {
        "status": status,
        "timestamp": (at or _utcnow()).isoformat(),
    }
    if note:
        entry["note"] = note
    return entry


def _append_history(order: Any, status: str, note: Optional[str], now: Optional[datetime]) -> None:
    # Assign a new list so the ORM sees the JSON column change
    order.status_history = [
        *(order.status_history or []),
        history_entry(status, note or DEFAULT_NOTES.get(status), now),
    ]


def next_fulfillment_state(current: str) -> Optional[str]:
    """Immediate successor of `current`, or None at the end of the chain."""
    if current not in FULFILLMENT_SEQUENCE:
        return None
    index = FULFILLMENT_SEQUENCE.index(current)
    if index + 1 >= len(FULFILLMENT_SEQUENCE):
        return None
    return FULFILLMENT_SEQUENCE[index + 1]


def start_history(note: str = "Order placed", now: Optional[datetime] = None) -> list[dict[str, Any]]:
    return [history_entry(OrderStatus.PENDING.value, note, now)]


def verify_payment(order: Any, note: Optional[str] = None, now: Optional[datetime] = None) -> bool:
    """Mark payment verified. Does not advance fulfillment."""
    current = order.payment_status
    if current == PaymentStatus.VERIFIED.value:
        return False
    if current != PaymentStatus.PENDING.value:
        raise InvalidTransitionError(
            current, PaymentStatus.VERIFIED.value, "payment is no longer pending"
        )

    order.payment_status = PaymentStatus.VERIFIED.value
    _append_history(order, PaymentStatus.VERIFIED.value, note, now)
    return True


def reject_payment(order: Any, note: Optional[str] = None, now: Optional[datetime] = None) -> bool:
    """Mark payment rejected. Fulfillment is blocked for good afterwards."""
    current = order.payment_status
    if current == PaymentStatus.REJECTED.value:
        return False
    if current != PaymentStatus.PENDING.value:
        raise InvalidTransitionError(
            current, PaymentStatus.REJECTED.value, "payment is no longer pending"
        )

    order.payment_status = PaymentStatus.REJECTED.value
    _append_history(order, PaymentStatus.REJECTED.value, note, now)
    return True


def advance_fulfillment(
    order: Any,
    target: str,
    *,
    tracking_number: Optional[str] = None,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Move fulfillment one step forward.

    `shipped` needs a tracking number in the same call. Cancelling goes
    through `cancel`, not here.
    """
    current = order.order_status

    if target not in FULFILLMENT_SEQUENCE[1:]:
        reason = "use cancel" if target == OrderStatus.CANCELLED.value else "not a forward fulfillment state"
        raise InvalidTransitionError(current, target, reason)
    if current == OrderStatus.CANCELLED.value:
        raise InvalidTransitionError(current, target, "order is cancelled")
    if order.payment_status == PaymentStatus.REJECTED.value:
        raise InvalidTransitionError(current, target, "payment was rejected")
    if order.payment_status != PaymentStatus.VERIFIED.value:
        raise InvalidTransitionError(current, target, "payment has not been verified")

    if current == target:
        return False

    expected = next_fulfillment_state(current)
    if target != expected:
        raise InvalidTransitionError(
            current, target, f"next allowed state is '{expected}'" if expected else "order is already delivered"
        )

    if target == OrderStatus.SHIPPED.value:
        tracking_number = (tracking_number or "").strip()
        if not tracking_number:
            raise InvalidTransitionError(current, target, "tracking number is required to ship")
        order.tracking_number = tracking_number
        if note is None:
            note = f"Order shipped (tracking {tracking_number})"

    order.order_status = target
    _append_history(order, target, note, now)
    return True


def cancel(order: Any, note: Optional[str] = None, now: Optional[datetime] = None) -> bool:
    """Cancel an order that has not shipped yet."""
    current = order.order_status
    if current == OrderStatus.CANCELLED.value:
        return False
    if current not in CANCELLABLE_STATES:
        raise InvalidTransitionError(
            current, OrderStatus.CANCELLED.value, "order has already shipped"
        )

    order.order_status = OrderStatus.CANCELLED.value
    _append_history(order, OrderStatus.CANCELLED.value, note, now)
    return True


def generate_delivery_otp() -> str:
    """Six-digit code the customer uses to confirm delivery."""
    return f"{secrets.randbelow(900000) + 100000}"


def confirm_delivery(order: Any, otp: str, now: Optional[datetime] = None) -> bool:
    """Customer-side delivery confirmation against the OTP issued at shipping."""
    current = order.order_status
    if current == OrderStatus.DELIVERED.value:
        return False
    if current != OrderStatus.SHIPPED.value:
        raise InvalidTransitionError(current, OrderStatus.DELIVERED.value, "order is not in shipped status")
    if not order.delivery_otp or not hmac.compare_digest(str(otp), str(order.delivery_otp)):
        raise ValidationError("Invalid OTP. Delivery cannot be confirmed.")

    return advance_fulfillment(
        order,
        OrderStatus.DELIVERED.value,
        note="Delivery confirmed by customer",
        now=now,
    )


@dataclass(frozen=True)
class StockWarning:
    """Advisory: a line item asks for more units than are in stock."""

    product_id: str
    name: str
    requested: int
    available: int

    @property
    def message(self) -> str:
        return f"Not enough stock for {self.name}: requested {self.requested}, available {self.available}"


def stock_warnings(order: Any, stock_by_product: Mapping[str, int]) -> list[StockWarning]:
    """
    Compare each line item against current stock.

    Only meaningful while payment is pending; never blocks a transition.
    Products missing from `stock_by_product` count as zero stock.
    """
    if order.payment_status != PaymentStatus.PENDING.value:
        return []

    warnings = []
    for item in order.items or []:
        product_id = str(item["product_id"])
        available = int(stock_by_product.get(product_id, 0))
        requested = int(item["quantity"])
        if available < requested:
            warnings.append(
                StockWarning(
                    product_id=product_id,
                    name=item.get("name", product_id),
                    requested=requested,
                    available=available,
                )
            )
    return warnings
