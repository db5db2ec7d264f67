"""Tests for Order state machine: forward and backward moves, skipping, and invalid transition guards."""

import pytest
from ordering.errors import (
    CannotCancelShippedOrDelivered,
    InvalidStatus,
    InvalidStatusTransition,
)
from ordering.order.events import OrderCancelled, OrderStatusChanged
from ordering.order.order import Order, OrderStatus, allowed_transitions
from ordering.stock.product import Product

ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "street": "12 Analytical Row",
    "city": "London",
    "state": "Greater London",
    "zip_code": "N1 9GU",
    "country": "UK",
    "phone": "+44 20 7946 0000",
}


def _make_order():
    product = Product.register(name="Widget", price=50.0, stock=5)
    order = Order.place(
        customer_id="cust-001",
        order_number="ORD123456001",
        lines=[(product, 2)],
        shipping_address=ADDRESS,
        payment_method="credit_card",
    )
    order._events.clear()
    return order


def _order_at_state(target_status):
    """Create an order and walk it forward one step at a time to the desired state."""
    order = _make_order()
    if target_status == OrderStatus.CANCELLED:
        order.cancel(reason="test")
        order._events.clear()
        return order

    for status in [OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]:
        if OrderStatus(order.order_status) == target_status:
            break
        order.advance_to(status)
    order._events.clear()
    return order


class TestForwardTransitions:
    def test_pending_to_confirmed(self):
        order = _order_at_state(OrderStatus.PENDING)
        order.advance_to(OrderStatus.CONFIRMED)
        assert order.order_status == OrderStatus.CONFIRMED.value

    def test_confirmed_to_processing(self):
        order = _order_at_state(OrderStatus.CONFIRMED)
        order.advance_to("processing")
        assert order.order_status == OrderStatus.PROCESSING.value

    def test_processing_to_shipped_stamps_shipped_at(self):
        order = _order_at_state(OrderStatus.PROCESSING)
        order.advance_to(OrderStatus.SHIPPED)
        assert order.order_status == OrderStatus.SHIPPED.value
        assert order.shipped_at is not None

    def test_shipped_to_delivered_stamps_delivered_at(self):
        order = _order_at_state(OrderStatus.SHIPPED)
        order.advance_to(OrderStatus.DELIVERED)
        assert order.order_status == OrderStatus.DELIVERED.value
        assert order.delivered_at is not None

    def test_forward_skip_is_allowed(self):
        order = _order_at_state(OrderStatus.CONFIRMED)
        order.advance_to(OrderStatus.SHIPPED)
        assert order.order_status == OrderStatus.SHIPPED.value

    def test_pending_straight_to_delivered(self):
        order = _order_at_state(OrderStatus.PENDING)
        order.advance_to(OrderStatus.DELIVERED)
        assert order.order_status == OrderStatus.DELIVERED.value

    def test_transition_raises_status_changed_event(self):
        order = _order_at_state(OrderStatus.PENDING)
        order.advance_to(OrderStatus.CONFIRMED, note="Checked by warehouse", updated_by="admin-1")

        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.new_status == "confirmed"
        assert event.updated_by == "admin-1"


class TestBackwardTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.CONFIRMED, OrderStatus.PENDING),
            (OrderStatus.SHIPPED, OrderStatus.PROCESSING),
            (OrderStatus.PROCESSING, OrderStatus.CONFIRMED),
        ],
    )
    def test_admin_may_move_back(self, current, target):
        order = _order_at_state(current)
        order.advance_to(target, updated_by="admin-1")

        assert order.order_status == target.value
        assert order._events[0].previous_status == current.value
        assert order._events[0].new_status == target.value

    def test_moved_back_from_shipped_can_be_cancelled(self):
        order = _order_at_state(OrderStatus.SHIPPED)
        order.advance_to(OrderStatus.PROCESSING)

        order.cancel(reason="Returned to warehouse")

        assert order.order_status == OrderStatus.CANCELLED.value

    def test_allowed_transitions_from_processing(self):
        assert allowed_transitions(OrderStatus.PROCESSING) == {
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        }


class TestInvalidTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
            (OrderStatus.DELIVERED, OrderStatus.PENDING),
            (OrderStatus.CANCELLED, OrderStatus.PENDING),
        ],
    )
    def test_move_out_of_terminal_state_rejected(self, current, target):
        order = _order_at_state(current)
        with pytest.raises(InvalidStatusTransition):
            order.advance_to(target)
        assert order.order_status == current.value

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.SHIPPED])
    def test_same_state_rejected(self, status):
        order = _order_at_state(status)
        with pytest.raises(InvalidStatusTransition):
            order.advance_to(status)

    def test_cancelled_is_terminal(self):
        order = _order_at_state(OrderStatus.CANCELLED)
        with pytest.raises(InvalidStatusTransition):
            order.advance_to(OrderStatus.CONFIRMED)

    def test_delivered_is_terminal(self):
        order = _order_at_state(OrderStatus.DELIVERED)
        assert allowed_transitions(OrderStatus.DELIVERED) == set()
        with pytest.raises(InvalidStatusTransition):
            order.advance_to(OrderStatus.DELIVERED)

    def test_unknown_status_rejected(self):
        order = _order_at_state(OrderStatus.PENDING)
        with pytest.raises(InvalidStatus):
            order.advance_to("teleported")

    def test_advance_to_cancelled_is_not_a_fulfillment_move(self):
        order = _order_at_state(OrderStatus.PENDING)
        with pytest.raises(InvalidStatusTransition):
            order.advance_to(OrderStatus.CANCELLED)


class TestCancellation:
    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING])
    def test_cancel_from_cancellable_states(self, status):
        order = _order_at_state(status)
        lines = order.cancel(reason="Changed my mind", cancelled_by="cust-001")

        assert order.order_status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "Changed my mind"
        assert order.cancelled_at is not None
        assert lines == [(str(order.items[0].product_id), 2)]

    @pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_cancel_after_shipping_rejected(self, status):
        order = _order_at_state(status)
        with pytest.raises(CannotCancelShippedOrDelivered) as exc:
            order.cancel()
        assert exc.value.message == "Cannot cancel order that has been shipped or delivered"
        assert order.order_status == status.value

    def test_cancel_twice_rejected(self):
        order = _order_at_state(OrderStatus.CANCELLED)
        with pytest.raises(InvalidStatusTransition):
            order.cancel()

    def test_cancel_records_default_note(self):
        order = _order_at_state(OrderStatus.PENDING)
        order.cancel()
        assert order.timeline[-1].note == "Order cancelled by user"
        assert order.timeline[-1].status == "cancelled"

    def test_cancel_raises_event_with_restock_lines(self):
        order = _order_at_state(OrderStatus.CONFIRMED)
        order.cancel(reason="Found it cheaper", cancelled_by="cust-001")

        event = order._events[0]
        assert isinstance(event, OrderCancelled)
        assert event.previous_status == "confirmed"
        assert '"quantity": 2' in event.items


class TestStatusHistory:
    def test_history_appends_in_sequence(self):
        order = _order_at_state(OrderStatus.PENDING)
        order.advance_to(OrderStatus.CONFIRMED)
        order.advance_to(OrderStatus.SHIPPED, note="Left the warehouse")

        timeline = order.timeline
        assert [entry.status for entry in timeline] == ["pending", "confirmed", "shipped"]
        assert [entry.sequence for entry in timeline] == [1, 2, 3]
        assert timeline[0].note == "Order created"
        assert timeline[1].note == "Order status updated to confirmed"
        assert timeline[2].note == "Left the warehouse"

    def test_timeline_is_read_only(self):
        order = _order_at_state(OrderStatus.PENDING)
        assert isinstance(order.timeline, tuple)
