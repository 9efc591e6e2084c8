"""Checkout: turn a priced cart into a stored order.

The cart is re-priced server side with the same calculator the till uses for
its live preview, tax is added, and the result passes the strict submission
gate before anything is written.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, String, Text

from pos import settings
from pos.domain import pos
from pos.order.creation import record_order
from pos.order.order import Order, OrderStatus
from pos.pricing.cart import (
    ManualDiscount,
    apply_tax,
    discount_label,
    price_cart,
    validate_submission,
)
from pos.pricing.catalogue import LineItem

logger = structlog.get_logger(__name__)


@pos.command(part_of="Order")
class Checkout:
    customer = String(max_length=255, default="Walk-in Customer")
    items = Text(required=True)  # JSON: list of cart line dicts
    discount_kind = String(max_length=20)
    discount_value = String(max_length=50)  # raw text from the discount field
    discount_label = String(max_length=100)
    tax_rate = Float()  # defaults to POS_TAX_RATE
    payment_method = String(required=True, max_length=20)
    paid_amount = String(max_length=50)  # cash received, as typed
    cashier_id = String(required=True, max_length=50)
    cashier_name = String(required=True, max_length=255)


def cart_lines(items_data) -> list[LineItem]:
    return [
        LineItem(
            product_id=str(line.get("product_id")),
            name=line.get("name"),
            unit_price=line.get("unit_price"),
            quantity=line.get("quantity"),
            category=line.get("category"),
            variant=line.get("variant"),
        )
        for line in items_data or []
    ]


@pos.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(Checkout)
    def checkout(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        try:
            lines = cart_lines(items_data)
            manual_discount = None
            if command.discount_kind:
                manual_discount = ManualDiscount(
                    kind=command.discount_kind,
                    value=command.discount_value,
                    label=command.discount_label,
                )

            rate = command.tax_rate if command.tax_rate is not None else settings.tax_rate()
            totals = apply_tax(price_cart(lines, manual_discount), rate)
            tendered = validate_submission(lines, command.payment_method, command.paid_amount, totals.total)
        except ValidationError as exc:
            logger.warning(
                "Checkout rejected",
                cashier_id=command.cashier_id,
                payment_method=command.payment_method,
                errors=exc.messages,
            )
            raise

        return record_order(
            customer=command.customer or "Walk-in Customer",
            items_data=[
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "category": line.category,
                    "variant": line.variant,
                }
                for line in lines
            ],
            payment_method=command.payment_method,
            cashier_id=command.cashier_id,
            cashier_name=command.cashier_name,
            discount_amount=totals.discount_amount,
            discount_label=discount_label(manual_discount),
            tax=totals.tax,
            paid_amount=tendered,
            status=OrderStatus.PENDING.value,
        )
