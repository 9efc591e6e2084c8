"""Order aggregate: the authoritative record of a sale at the counter.

Orders are created at checkout, moved along the barista board, and never
deleted: cancellation is a status. Refunds do not touch the original order;
they are booked as separate negative *adjustment* orders, so revenue for a
period nets an order against its adjustments by summation.

State Machine:
    PENDING ⇄ PREPARING ⇄ READY → COMPLETED
    CANCELLED (from PENDING, PREPARING, READY)

Early stages may be stepped back (e.g. READY → PENDING when a drink is
remade). COMPLETED and CANCELLED are final; re-applying the current final
status is accepted as a no-op.
"""

import math
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String

from pos.domain import pos
from pos.order.events import AdjustmentRecorded, OrderPlaced, OrderStatusChanged
from pos.pricing.cart import PaymentMethod, change_due
from pos.pricing.money import round_money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderKind(Enum):
    SALE = "sale"
    ADJUSTMENT = "adjustment"


_OPEN_STATES = {
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
}

# State machine transition map
_VALID_TRANSITIONS = {
    **{state: set(OrderStatus) for state in _OPEN_STATES},
    OrderStatus.COMPLETED: {OrderStatus.COMPLETED},  # Terminal
    OrderStatus.CANCELLED: {OrderStatus.CANCELLED},  # Terminal
}

# Placeholder attribution when an adjustment's original order is unknown
ADJUSTMENT_FALLBACKS = {
    "customer": "Adjustment",
    "payment_method": PaymentMethod.CARD.value,
    "cashier_id": "unknown",
    "cashier_name": "Unknown Cashier",
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@pos.entity(part_of="Order")
class OrderItem:
    """A line on an order, at the unit price actually charged.

    Adjustment orders carry a single synthetic line with a negative price.
    """

    product_id = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True)
    quantity = Integer(required=True, min_value=1)
    category = String(max_length=100)
    variant = String(max_length=100)

    @property
    def line_total(self) -> float:
        return round_money(self.unit_price * self.quantity)


def _line_quantity(line) -> int:
    quantity = line.get("quantity")
    if isinstance(quantity, bool):
        quantity = None
    try:
        number = float(quantity)
    except (TypeError, ValueError):
        raise ValidationError({"items": [f"Quantity for '{line.get('name')}' must be a whole number"]}) from None
    if not math.isfinite(number) or number != int(number):
        raise ValidationError({"items": [f"Quantity for '{line.get('name')}' must be a whole number"]})
    if number < 1:
        raise ValidationError({"items": [f"Quantity for '{line.get('name')}' must be at least 1"]})
    return int(number)


def _line_price(line) -> float:
    price = line.get("unit_price", 0.0)
    try:
        number = float(price)
    except (TypeError, ValueError):
        raise ValidationError({"items": [f"Price for '{line.get('name')}' must be a number"]}) from None
    if isinstance(price, bool) or not math.isfinite(number):
        raise ValidationError({"items": [f"Price for '{line.get('name')}' must be a number"]})
    if number < 0:
        raise ValidationError({"items": [f"Price for '{line.get('name')}' cannot be negative"]})
    return round_money(number)


def build_order_items(items_data) -> list[OrderItem]:
    """Turn raw line dicts into ``OrderItem`` entities for a sale.

    Raises:
        ValidationError: when there are no lines, or a line has a
            quantity that is not a positive whole number, or a price
            that is negative or not a number.
    """
    if not items_data:
        raise ValidationError({"items": ["An order must contain at least one item"]})

    items = []
    for line in items_data:
        quantity = _line_quantity(line)
        unit_price = _line_price(line)

        items.append(
            OrderItem(
                product_id=str(line.get("product_id")),
                name=line.get("name"),
                unit_price=unit_price,
                quantity=quantity,
                category=line.get("category"),
                variant=line.get("variant"),
            )
        )
    return items


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@pos.aggregate
class Order:
    customer = String(required=True, max_length=255)
    items = HasMany(OrderItem)
    subtotal = Float(default=0.0)
    discount_amount = Float(default=0.0)
    discount_label = String(max_length=100)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CARD.value)
    paid_amount = Float()  # cash only
    change_amount = Float()  # cash only
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    kind = String(choices=OrderKind, default=OrderKind.SALE.value)
    adjusts_order_id = String(max_length=50)
    sequence = Integer(required=True, min_value=1)
    cashier_id = String(required=True, max_length=50)
    cashier_name = String(required=True, max_length=255)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    @invariant.post
    def sale_must_have_items(self):
        if self.kind == OrderKind.SALE.value and not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @invariant.post
    def adjustment_must_have_a_single_line(self):
        if self.kind == OrderKind.ADJUSTMENT.value and len(self.items) != 1:
            raise ValidationError({"items": ["An adjustment carries exactly one line"]})

    @invariant.post
    def discount_must_not_exceed_subtotal(self):
        if self.kind != OrderKind.SALE.value:
            return
        if (self.discount_amount or 0.0) < 0 or (self.discount_amount or 0.0) > (self.subtotal or 0.0):
            raise ValidationError({"discount_amount": ["Discount must be between 0 and the subtotal"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id,
        sequence,
        customer,
        items,
        payment_method,
        cashier_id,
        cashier_name,
        discount_amount=0.0,
        discount_label=None,
        tax=0.0,
        paid_amount=None,
        status=OrderStatus.PENDING.value,
        now=None,
    ):
        """Create a sale from priced lines.

        The subtotal is recomputed from the lines and the total follows
        ``max(0, subtotal - discount + tax)``. ``paid_amount`` and the
        derived change are only kept for cash payments.

        Args:
            order_id: Identifier from the allocator, e.g. ``ORD-007``.
            sequence: Allocator value behind ``order_id``.
            items: ``OrderItem`` entities (see ``build_order_items``).
            status: Initial status, conventionally ``pending``.
        """
        now = now or datetime.now(UTC)

        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError({"payment_method": [f"Unknown payment method: {payment_method}"]}) from None
        try:
            initial_status = OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None

        subtotal = round_money(sum(item.unit_price * item.quantity for item in items))
        discount_amount = round_money(discount_amount or 0.0)
        if discount_amount < 0 or discount_amount > subtotal:
            raise ValidationError({"discount_amount": ["Discount must be between 0 and the subtotal"]})
        tax = round_money(tax or 0.0)
        total = round_money(max(0.0, subtotal - discount_amount + tax))

        change_amount = None
        if method == PaymentMethod.CASH and paid_amount is not None:
            paid_amount = round_money(paid_amount)
            change_amount = change_due(paid_amount, total)
        else:
            paid_amount = None

        order = cls(
            id=order_id,
            sequence=sequence,
            customer=customer,
            items=items,
            subtotal=subtotal,
            discount_amount=discount_amount,
            discount_label=discount_label,
            tax=tax,
            total=total,
            payment_method=method.value,
            paid_amount=paid_amount,
            change_amount=change_amount,
            status=initial_status.value,
            kind=OrderKind.SALE.value,
            cashier_id=cashier_id,
            cashier_name=cashier_name,
            created_at=now,
            updated_at=now,
            completed_at=now if initial_status == OrderStatus.COMPLETED else None,
        )

        order.raise_(
            OrderPlaced(
                order_id=order_id,
                customer=customer,
                subtotal=subtotal,
                discount_amount=discount_amount,
                tax=tax,
                total=total,
                payment_method=method.value,
                status=initial_status.value,
                cashier_id=cashier_id,
                placed_at=now,
            )
        )
        return order

    @classmethod
    def create_adjustment(cls, adjustment_id, sequence, original_order_id, amount, original=None, now=None):
        """Create a completed negative order booked against ``original_order_id``.

        The sign of ``amount`` is ignored: the stored effect is always
        ``-abs(amount)``. Attribution is copied from ``original`` when it is
        known, otherwise placeholders are used.
        """
        now = now or datetime.now(UTC)
        value = -abs(round_money(amount))
        if value == 0:
            raise ValidationError({"amount": ["Adjustment amount must be a non-zero number"]})

        def _inherit(field):
            inherited = getattr(original, field, None) if original is not None else None
            return inherited or ADJUSTMENT_FALLBACKS[field]

        order = cls(
            id=adjustment_id,
            sequence=sequence,
            customer=_inherit("customer"),
            items=[
                OrderItem(
                    product_id="adj",
                    name=f"Adjustment for {original_order_id}",
                    unit_price=value,
                    quantity=1,
                    category="adjustment",
                )
            ],
            subtotal=value,
            discount_amount=0.0,
            tax=0.0,
            total=value,
            payment_method=_inherit("payment_method"),
            status=OrderStatus.COMPLETED.value,
            kind=OrderKind.ADJUSTMENT.value,
            adjusts_order_id=original_order_id,
            cashier_id=_inherit("cashier_id"),
            cashier_name=_inherit("cashier_name"),
            created_at=now,
            updated_at=now,
            completed_at=now,
        )

        order.raise_(
            AdjustmentRecorded(
                order_id=adjustment_id,
                original_order_id=original_order_id,
                amount=value,
                recorded_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    @property
    def is_adjustment(self) -> bool:
        return self.kind == OrderKind.ADJUSTMENT.value

    def can_transition_to(self, target_status) -> bool:
        return OrderStatus(target_status) in _VALID_TRANSITIONS[OrderStatus(self.status)]

    def transition_to(self, new_status, now=None):
        """Move the order to ``new_status`` and stamp ``updated_at``.

        The first transition to COMPLETED stamps ``completed_at``; it is
        never reset or cleared afterwards.
        """
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        current = OrderStatus(self.status)
        if not self.can_transition_to(target):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = now or datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if target == OrderStatus.COMPLETED and self.completed_at is None:
            self.completed_at = now

        if target != current:
            self.raise_(
                OrderStatusChanged(
                    order_id=str(self.id),
                    previous_status=current.value,
                    new_status=target.value,
                    changed_at=now,
                )
            )

    def cancel(self, now=None):
        """Cancel the order.

        Cancelling a completed order raises ``ValidationError``; cancelling
        an already-cancelled order only refreshes ``updated_at``.
        """
        self.transition_to(OrderStatus.CANCELLED, now=now)
