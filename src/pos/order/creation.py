"""Order creation: command and handler for committing a draft order."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, String, Text
from protean.utils.globals import current_domain

from pos.domain import pos
from pos.order.order import Order, OrderStatus, build_order_items
from pos.order.sequence import ORDER_PREFIX, allocate_identifier
from pos.pricing.money import round_money

logger = structlog.get_logger(__name__)


@pos.command(part_of="Order")
class PlaceOrder:
    customer = String(required=True, max_length=255)
    items = Text(required=True)  # JSON: list of line dicts
    discount_amount = Float(default=0.0)
    discount_label = String(max_length=100)
    tax = Float(default=0.0)
    payment_method = String(required=True, max_length=20)
    paid_amount = Float()
    status = String(max_length=20, default=OrderStatus.PENDING.value)
    cashier_id = String(required=True, max_length=50)
    cashier_name = String(required=True, max_length=255)


def record_order(
    customer,
    items_data,
    payment_method,
    cashier_id,
    cashier_name,
    discount_amount=0.0,
    discount_label=None,
    tax=0.0,
    paid_amount=None,
    status=OrderStatus.PENDING.value,
):
    """Validate a draft, allocate its number and store it. Returns the id.

    Must be called from inside a command handler.
    """
    items = build_order_items(items_data)

    # Reject before a number is drawn from the counter
    subtotal = round_money(sum(item.unit_price * item.quantity for item in items))
    if not 0 <= round_money(discount_amount or 0.0) <= subtotal:
        raise ValidationError({"discount_amount": ["Discount must be between 0 and the subtotal"]})

    order_id, sequence = allocate_identifier(ORDER_PREFIX)
    order = Order.create(
        order_id=order_id,
        sequence=sequence,
        customer=customer,
        items=items,
        payment_method=payment_method,
        cashier_id=cashier_id,
        cashier_name=cashier_name,
        discount_amount=discount_amount,
        discount_label=discount_label,
        tax=tax,
        paid_amount=paid_amount,
        status=status or OrderStatus.PENDING.value,
    )
    current_domain.repository_for(Order).add(order)

    logger.info(
        "Order placed",
        order_id=order_id,
        customer=customer,
        total=order.total,
        payment_method=order.payment_method,
        cashier_id=cashier_id,
    )
    return order_id


@pos.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        return record_order(
            customer=command.customer,
            items_data=items_data,
            payment_method=command.payment_method,
            cashier_id=command.cashier_id,
            cashier_name=command.cashier_name,
            discount_amount=command.discount_amount,
            discount_label=command.discount_label,
            tax=command.tax,
            paid_amount=command.paid_amount,
            status=command.status,
        )
