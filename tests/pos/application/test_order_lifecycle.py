"""Application tests for status changes and cancellation on the barista board."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from pos.order.creation import PlaceOrder
from pos.order.lifecycle import CancelOrder, SetOrderStatus
from pos.order.order import Order, OrderStatus


def _place_order():
    command = PlaceOrder(
        customer="Ana",
        items=json.dumps([{"product_id": "latte", "name": "Latte", "unit_price": 4.0, "quantity": 1}]),
        payment_method="card",
        cashier_id="c-01",
        cashier_name="Sam",
    )
    return current_domain.process(command, asynchronous=False)


def _set_status(order_id, status):
    current_domain.process(SetOrderStatus(order_id=order_id, status=status), asynchronous=False)


def _stored(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestSetStatus:
    def test_moves_along_the_board(self):
        order_id = _place_order()
        for status in ("preparing", "ready", "completed"):
            _set_status(order_id, status)
            assert _stored(order_id).status == status

    def test_completion_is_idempotent(self):
        order_id = _place_order()
        _set_status(order_id, "completed")
        first = _stored(order_id).completed_at

        _set_status(order_id, "completed")
        order = _stored(order_id)
        assert order.status == OrderStatus.COMPLETED.value
        assert order.completed_at == first
        assert order.updated_at >= first

    def test_leaving_completed_is_rejected(self):
        order_id = _place_order()
        _set_status(order_id, "completed")
        with pytest.raises(ValidationError):
            _set_status(order_id, "pending")
        assert _stored(order_id).status == OrderStatus.COMPLETED.value

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            _set_status("ORD-999", "ready")


class TestCancelOrder:
    def test_cancel_open_order(self):
        order_id = _place_order()
        current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)
        assert _stored(order_id).status == OrderStatus.CANCELLED.value

    def test_cancel_completed_order_is_rejected(self):
        order_id = _place_order()
        _set_status(order_id, "completed")
        with pytest.raises(ValidationError):
            current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)

    def test_cancel_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(CancelOrder(order_id="ORD-999"), asynchronous=False)

    def test_recancel_keeps_order_cancelled(self):
        order_id = _place_order()
        current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)
        current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)
        order = _stored(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.completed_at is None
