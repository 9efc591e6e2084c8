"""Cart pricing: subtotal, manual discount, tax and cash change.

Two tiers of input handling:

* Live preview (``price_cart``, ``parse_amount``): runs on every keystroke of
  the cashier's discount field, so malformed input degrades to a zero
  discount instead of raising.
* Submission gate (``validate_submission``): runs once when the order is
  placed and rejects what the preview let through: an empty cart, bad
  quantities, an unknown payment method, or cash that does not cover the
  total.

Catalogue promotions are already folded into each line's unit price; the
manual discount is applied once, on top of the catalogue-discounted subtotal.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ValidationError

from pos.pricing.money import format_money, round_money


class DiscountKind(Enum):
    PERCENT = "percent"
    AMOUNT = "amount"


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    DIGITAL = "digital"


# Leading numeric prefix, the way a live-typed field is read ("12." -> 12)
_NUMERIC_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class ManualDiscount:
    """Cashier-entered discount. ``value`` is whatever the field holds."""

    kind: DiscountKind | str = DiscountKind.PERCENT
    value: object = 0
    label: str | None = None  # overrides the generated receipt label


@dataclass(frozen=True)
class CartPricing:
    subtotal: float
    discount_amount: float
    total: float


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal: float
    discount_amount: float
    tax: float
    total: float


def parse_amount(raw) -> float:
    """Leniently read a typed number; anything unreadable is ``0.0``."""
    if raw is None or isinstance(raw, bool):
        return 0.0

    if isinstance(raw, int | float):
        value = float(raw)
    else:
        match = _NUMERIC_PREFIX.match(str(raw).strip())
        if match is None:
            return 0.0
        value = float(match.group(0))

    if not math.isfinite(value):
        return 0.0
    return value


def _discount_kind(kind):
    if isinstance(kind, DiscountKind):
        return kind
    try:
        return DiscountKind(str(kind).strip().lower())
    except ValueError:
        return None


def normalized_discount(manual_discount):
    """Return ``(kind, clamped_value)`` for a manual discount.

    Percentages are clamped to ``[0, 100]`` and amounts to ``>= 0``. An
    absent discount or an unknown kind comes back as ``(None, 0.0)``.
    """
    if manual_discount is None:
        return None, 0.0

    kind = _discount_kind(manual_discount.kind)
    if kind is None:
        return None, 0.0

    value = parse_amount(manual_discount.value)
    if kind == DiscountKind.PERCENT:
        return kind, min(100.0, max(0.0, value))
    return kind, max(0.0, value)


def price_cart(items, manual_discount=None) -> CartPricing:
    """Price a cart. Never raises on malformed discount input."""
    subtotal = round_money(sum(item.unit_price * item.quantity for item in items))

    kind, value = normalized_discount(manual_discount)
    if kind == DiscountKind.PERCENT:
        raw_discount = subtotal * value / 100
    elif kind == DiscountKind.AMOUNT:
        raw_discount = value
    else:
        raw_discount = 0.0

    # A manual discount can never push the total below zero
    discount_amount = round_money(max(0.0, min(subtotal, raw_discount)))
    total = round_money(max(0.0, subtotal - discount_amount))

    return CartPricing(subtotal=subtotal, discount_amount=discount_amount, total=total)


def apply_tax(pricing: CartPricing, rate: float) -> CheckoutTotals:
    """Add sales tax on the discounted amount; the total stays floored at zero."""
    taxable = max(0.0, pricing.subtotal - pricing.discount_amount)
    tax = round_money(taxable * rate)
    total = round_money(max(0.0, pricing.subtotal - pricing.discount_amount + tax))
    return CheckoutTotals(
        subtotal=pricing.subtotal,
        discount_amount=pricing.discount_amount,
        tax=tax,
        total=total,
    )


def change_due(paid_amount, total) -> float:
    """Change handed back for a cash payment."""
    return round_money(max(0.0, paid_amount - total))


def discount_label(manual_discount) -> str | None:
    """Receipt label for a manual discount, e.g. ``10% off`` or ``$2.00 off``."""
    kind, value = normalized_discount(manual_discount)
    if kind is None or value <= 0:
        return None
    if manual_discount.label:
        return manual_discount.label
    if kind == DiscountKind.PERCENT:
        return f"{value:g}% off"
    return f"{format_money(value)} off"


def validate_submission(items, payment_method, paid_amount, total) -> float | None:
    """Strict gate applied when an order is placed.

    Returns the parsed cash tendered (``None`` for non-cash payments).

    Raises:
        ValidationError: with one entry per offending field.
    """
    errors = {}

    if not items:
        errors["items"] = ["An order must contain at least one item"]
    elif any(item.quantity is None or item.quantity < 1 for item in items):
        errors["items"] = ["Item quantities must be at least 1"]

    try:
        method = PaymentMethod(payment_method)
    except ValueError:
        method = None
        errors["payment_method"] = [f"Unknown payment method: {payment_method}"]

    tendered = None
    if method == PaymentMethod.CASH:
        try:
            tendered = float(paid_amount)
        except (TypeError, ValueError):
            errors["paid_amount"] = ["Cash received must be a number"]
        else:
            if not math.isfinite(tendered):
                errors["paid_amount"] = ["Cash received must be a number"]
            elif round_money(tendered) < round_money(total):
                errors["paid_amount"] = [
                    f"Cash received ({format_money(tendered)}) is less than the total ({format_money(total)})"
                ]

    if errors:
        raise ValidationError(errors)

    return round_money(tendered) if tendered is not None else None
