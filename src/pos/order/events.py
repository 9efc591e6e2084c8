"""Domain events for the Order aggregate.

Immutable facts about counter orders, raised as the store changes: an order
placed at the till, a status change on the barista board, an adjustment
booked against an earlier order.
"""

from protean.fields import DateTime, Float, Identifier, String

from pos.domain import pos


@pos.event(part_of="Order")
class OrderPlaced:
    """A sale was rung up and committed to the order store."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    customer = String(required=True)
    subtotal = Float(required=True)
    discount_amount = Float()
    tax = Float()
    total = Float(required=True)
    payment_method = String(required=True)
    status = String(required=True)
    cashier_id = String(required=True)
    placed_at = DateTime(required=True)


@pos.event(part_of="Order")
class OrderStatusChanged:
    """An order moved to a different lifecycle status."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@pos.event(part_of="Order")
class AdjustmentRecorded:
    """A negative adjustment order was booked against an earlier order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    original_order_id = String(required=True)
    amount = Float(required=True)  # always negative
    recorded_at = DateTime(required=True)
