"""
Tests for the order lifecycle state machine.
"""
import pytest

from storefront.core.errors import InvalidTransitionError, ValidationError
from storefront.models.order import Order
from storefront.services import order_state


def make_order(payment_status: str = "pending", order_status: str = "pending", **kwargs) -> Order:
    return Order(
        order_number="ORD-20250101-0001",
        user_id="customer-1",
        items=kwargs.pop(
            "items",
            [{"product_id": "p1", "name": "Hoodie", "unit_price": "500", "quantity": 2}],
        ),
        payment_status=payment_status,
        order_status=order_status,
        status_history=order_state.start_history(),
        **kwargs,
    )


def verified_order(order_status: str = "pending") -> Order:
    return make_order(payment_status="verified", order_status=order_status)


class TestPaymentTransitions:
    """Payment verification and rejection."""

    def test_verify_pending_payment(self):
        order = make_order()

        assert order_state.verify_payment(order) is True
        assert order.payment_status == "verified"
        assert order.order_status == "pending"
        assert order.status_history[-1]["status"] == "verified"

    def test_reject_pending_payment(self):
        order = make_order()

        assert order_state.reject_payment(order, note="Blurry receipt") is True
        assert order.payment_status == "rejected"
        assert order.status_history[-1]["note"] == "Blurry receipt"

    def test_verify_twice_is_noop(self):
        order = make_order()
        order_state.verify_payment(order)
        history_len = len(order.status_history)

        assert order_state.verify_payment(order) is False
        assert len(order.status_history) == history_len

    def test_verify_after_reject_fails(self):
        order = make_order(payment_status="rejected")

        with pytest.raises(InvalidTransitionError) as exc_info:
            order_state.verify_payment(order)

        assert exc_info.value.current == "rejected"
        assert exc_info.value.attempted == "verified"
        assert order.payment_status == "rejected"

    def test_reject_after_verify_fails(self):
        order = make_order(payment_status="verified")

        with pytest.raises(InvalidTransitionError):
            order_state.reject_payment(order)


class TestFulfillmentTransitions:
    """Forward-only fulfillment moves."""

    def test_processing_requires_verified_payment(self):
        order = make_order()

        with pytest.raises(InvalidTransitionError):
            order_state.advance_fulfillment(order, "processing")

        assert order.order_status == "pending"
        assert len(order.status_history) == 1

    def test_rejected_payment_blocks_fulfillment(self):
        order = make_order(payment_status="rejected")

        with pytest.raises(InvalidTransitionError) as exc_info:
            order_state.advance_fulfillment(order, "processing")

        assert "rejected" in exc_info.value.message

    def test_full_forward_chain(self):
        order = verified_order()

        order_state.advance_fulfillment(order, "processing")
        order_state.advance_fulfillment(order, "shipped", tracking_number="TRK123")
        order_state.advance_fulfillment(order, "delivered")

        assert order.order_status == "delivered"
        assert [h["status"] for h in order.status_history] == [
            "pending",
            "processing",
            "shipped",
            "delivered",
        ]

    def test_cannot_skip_processing(self):
        order = verified_order()

        with pytest.raises(InvalidTransitionError):
            order_state.advance_fulfillment(order, "shipped", tracking_number="TRK123")

    def test_cannot_move_backwards(self):
        order = verified_order(order_status="shipped")

        with pytest.raises(InvalidTransitionError):
            order_state.advance_fulfillment(order, "processing")

    def test_same_state_is_noop(self):
        order = verified_order(order_status="processing")

        assert order_state.advance_fulfillment(order, "processing") is False
        assert len(order.status_history) == 1

    def test_cancelled_is_not_a_fulfillment_target(self):
        order = verified_order()

        with pytest.raises(InvalidTransitionError) as exc_info:
            order_state.advance_fulfillment(order, "cancelled")

        assert "cancel" in exc_info.value.message

    def test_cancelled_order_cannot_advance(self):
        order = verified_order(order_status="cancelled")

        with pytest.raises(InvalidTransitionError):
            order_state.advance_fulfillment(order, "processing")


class TestTrackingRequirement:
    """Shipping needs a tracking number."""

    @pytest.mark.parametrize("tracking", [None, "", "   "])
    def test_ship_without_tracking_fails(self, tracking):
        order = verified_order(order_status="processing")

        with pytest.raises(InvalidTransitionError):
            order_state.advance_fulfillment(order, "shipped", tracking_number=tracking)

        assert order.order_status == "processing"
        assert order.tracking_number is None

    def test_ship_records_tracking_number(self):
        order = verified_order(order_status="processing")

        order_state.advance_fulfillment(order, "shipped", tracking_number="  TRK-9  ")

        assert order.tracking_number == "TRK-9"
        assert "TRK-9" in order.status_history[-1]["note"]


class TestCancellation:
    """Cancellation is allowed only before shipping."""

    @pytest.mark.parametrize("status", ["pending", "processing"])
    def test_cancel_before_shipping(self, status):
        order = verified_order(order_status=status)

        assert order_state.cancel(order, note="Customer request") is True
        assert order.order_status == "cancelled"
        assert order.status_history[-1]["status"] == "cancelled"
        assert order.status_history[-1]["note"] == "Customer request"

    @pytest.mark.parametrize("status", ["shipped", "delivered"])
    def test_cancel_after_shipping_fails(self, status):
        order = verified_order(order_status=status)

        with pytest.raises(InvalidTransitionError):
            order_state.cancel(order)

        assert order.order_status == status

    def test_cancel_with_pending_payment(self):
        order = make_order()

        assert order_state.cancel(order) is True
        assert order.payment_status == "pending"

    def test_cancel_twice_is_noop(self):
        order = make_order()
        order_state.cancel(order)

        assert order_state.cancel(order) is False
        assert len(order.status_history) == 2


class TestHistory:
    """Status history is append-only."""

    def test_each_transition_appends_one_entry(self):
        order = make_order()
        snapshots = [list(order.status_history)]

        order_state.verify_payment(order)
        snapshots.append(list(order.status_history))
        order_state.advance_fulfillment(order, "processing")
        snapshots.append(list(order.status_history))
        order_state.advance_fulfillment(order, "shipped", tracking_number="TRK")
        snapshots.append(list(order.status_history))

        for before, after in zip(snapshots, snapshots[1:]):
            assert len(after) == len(before) + 1
            assert after[: len(before)] == before

    def test_failed_transition_leaves_history_alone(self):
        order = make_order()
        before = list(order.status_history)

        with pytest.raises(InvalidTransitionError):
            order_state.advance_fulfillment(order, "shipped", tracking_number="TRK")

        assert order.status_history == before

    def test_entries_have_iso_timestamps(self):
        order = make_order()
        order_state.verify_payment(order)

        entry = order.status_history[-1]
        assert entry["timestamp"].endswith("+00:00")
        assert entry["note"] == "Payment verified"


class TestDeliveryConfirmation:
    """Customer-side delivery confirmation with OTP."""

    def test_generate_otp_is_six_digits(self):
        otp = order_state.generate_delivery_otp()

        assert len(otp) == 6
        assert otp.isdigit()

    def test_confirm_with_correct_otp(self):
        order = verified_order(order_status="shipped")
        order.delivery_otp = "123456"

        assert order_state.confirm_delivery(order, "123456") is True
        assert order.order_status == "delivered"
        assert order.status_history[-1]["note"] == "Delivery confirmed by customer"

    def test_confirm_with_wrong_otp(self):
        order = verified_order(order_status="shipped")
        order.delivery_otp = "123456"

        with pytest.raises(ValidationError):
            order_state.confirm_delivery(order, "654321")

        assert order.order_status == "shipped"

    def test_confirm_before_shipping(self):
        order = verified_order(order_status="processing")
        order.delivery_otp = "123456"

        with pytest.raises(InvalidTransitionError):
            order_state.confirm_delivery(order, "123456")

    def test_confirm_already_delivered_is_noop(self):
        order = verified_order(order_status="delivered")

        assert order_state.confirm_delivery(order, "000000") is False


class TestStockWarnings:
    """Advisory stock check."""

    def test_warns_when_short(self):
        order = make_order()

        warnings = order_state.stock_warnings(order, {"p1": 1})

        assert len(warnings) == 1
        assert warnings[0].requested == 2
        assert warnings[0].available == 1
        assert "Hoodie" in warnings[0].message

    def test_missing_product_counts_as_zero(self):
        order = make_order()

        warnings = order_state.stock_warnings(order, {})

        assert warnings[0].available == 0

    def test_enough_stock(self):
        assert order_state.stock_warnings(make_order(), {"p1": 5}) == []

    def test_only_while_payment_pending(self):
        order = make_order(payment_status="verified")

        assert order_state.stock_warnings(order, {}) == []
