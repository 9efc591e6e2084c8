"""Tests for Order state machine: valid transitions and final-state guards."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from pos.order.events import OrderStatusChanged
from pos.order.order import Order, OrderStatus, build_order_items

NOW = datetime(2026, 3, 14, 9, 30, tzinfo=UTC)
LATER = NOW + timedelta(minutes=5)
MUCH_LATER = NOW + timedelta(hours=1)

OPEN = [OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY]


def _order_at_state(status):
    order = Order.create(
        order_id="ORD-001",
        sequence=1,
        customer="Ana",
        items=build_order_items(
            [{"product_id": "latte", "name": "Latte", "unit_price": 4.0, "quantity": 1, "category": "coffee"}]
        ),
        payment_method="card",
        cashier_id="c-01",
        cashier_name="Sam",
        now=NOW,
    )
    if status != OrderStatus.PENDING:
        order.transition_to(status, now=NOW)
    order._events.clear()
    return order


# ---------------------------------------------------------------
# Open stages
# ---------------------------------------------------------------
class TestOpenStages:
    @pytest.mark.parametrize("source", OPEN)
    @pytest.mark.parametrize("target", list(OrderStatus))
    def test_open_order_can_move_anywhere(self, source, target):
        order = _order_at_state(source)
        order.transition_to(target, now=LATER)
        assert order.status == target.value
        assert order.updated_at == LATER

    def test_ready_back_to_pending(self):
        order = _order_at_state(OrderStatus.READY)
        order.transition_to(OrderStatus.PENDING)
        assert order.status == OrderStatus.PENDING.value
        assert order.can_transition_to(OrderStatus.COMPLETED)

    def test_accepts_status_as_text(self):
        order = _order_at_state(OrderStatus.PENDING)
        order.transition_to("preparing")
        assert order.status == OrderStatus.PREPARING.value

    def test_unknown_status_is_rejected(self):
        order = _order_at_state(OrderStatus.PENDING)
        with pytest.raises(ValidationError) as exc:
            order.transition_to("delivered")
        assert "status" in exc.value.messages


# ---------------------------------------------------------------
# Completion timestamps
# ---------------------------------------------------------------
class TestCompletion:
    def test_completion_stamps_completed_at(self):
        order = _order_at_state(OrderStatus.READY)
        order.transition_to(OrderStatus.COMPLETED, now=LATER)
        assert order.completed_at == LATER

    def test_recompletion_keeps_first_timestamp(self):
        order = _order_at_state(OrderStatus.READY)
        order.transition_to(OrderStatus.COMPLETED, now=LATER)
        order.transition_to(OrderStatus.COMPLETED, now=MUCH_LATER)
        assert order.status == OrderStatus.COMPLETED.value
        assert order.completed_at == LATER
        assert order.updated_at == MUCH_LATER


# ---------------------------------------------------------------
# Final states
# ---------------------------------------------------------------
class TestFinalStates:
    @pytest.mark.parametrize("target", [s for s in OrderStatus if s != OrderStatus.COMPLETED])
    def test_completed_cannot_be_left(self, target):
        order = _order_at_state(OrderStatus.COMPLETED)
        with pytest.raises(ValidationError):
            order.transition_to(target)
        assert order.status == OrderStatus.COMPLETED.value

    @pytest.mark.parametrize("target", [s for s in OrderStatus if s != OrderStatus.CANCELLED])
    def test_cancelled_cannot_be_left(self, target):
        order = _order_at_state(OrderStatus.CANCELLED)
        with pytest.raises(ValidationError):
            order.transition_to(target)
        assert order.status == OrderStatus.CANCELLED.value

    def test_cancel_completed_order_is_rejected(self):
        order = _order_at_state(OrderStatus.COMPLETED)
        with pytest.raises(ValidationError):
            order.cancel()

    def test_recancel_is_a_no_op(self):
        order = _order_at_state(OrderStatus.CANCELLED)
        order.cancel(now=LATER)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.updated_at == LATER
        assert order.completed_at is None


# ---------------------------------------------------------------
# Events
# ---------------------------------------------------------------
class TestStatusEvents:
    def test_real_change_raises_event(self):
        order = _order_at_state(OrderStatus.PENDING)
        order.transition_to(OrderStatus.PREPARING, now=LATER)
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.new_status == "preparing"

    def test_no_op_raises_nothing(self):
        order = _order_at_state(OrderStatus.COMPLETED)
        order.transition_to(OrderStatus.COMPLETED)
        assert order._events == []
