"""Catalogue pricing: effective price of a product under a timed promotion.

The catalogue (menu management) is owned elsewhere; the POS reads an immutable
snapshot of each product when it is added to the cart. A product may carry a
percentage discount, optionally limited to a window of time. Both window
bounds are inclusive, and a missing bound leaves that side open.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, Integer, String

from pos import settings
from pos.domain import pos
from pos.pricing.money import round_money


@pos.value_object
class ProductSnapshot:
    """A product as the catalogue priced it at cart-build time."""

    product_id = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    category = String(max_length=100)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0)
    is_available = Boolean(default=True)
    discount_percent = Float()
    discount_starts_at = DateTime()
    discount_ends_at = DateTime()


@pos.value_object
class LineItem:
    """One product entry in a cart, at its already-discounted unit price."""

    product_id = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    category = String(max_length=100)
    variant = String(max_length=100)  # e.g. sugar level

    @property
    def line_total(self) -> float:
        return round_money(self.unit_price * self.quantity)


def _aware(value):
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=settings.shop_timezone())


def is_discount_active(product, now=None) -> bool:
    """True when the product has a positive discount and ``now`` is inside its window."""
    if not product.discount_percent or product.discount_percent <= 0:
        return False

    now = _aware(now or datetime.now(UTC))
    starts_at = _aware(product.discount_starts_at)
    ends_at = _aware(product.discount_ends_at)

    if starts_at is not None and now < starts_at:
        return False
    if ends_at is not None and now > ends_at:
        return False

    return True


def effective_price(product, now=None) -> float:
    """Price a cashier charges for the product at ``now``.

    Returns the list price when no discount is active, otherwise the price
    reduced by the discount percentage. Never negative.
    """
    if not is_discount_active(product, now):
        return product.price

    discounted = product.price * (1 - product.discount_percent / 100)
    return max(0.0, round_money(discounted))


def line_item_for(product, quantity=1, now=None, variant=None) -> LineItem:
    """Build a cart line for ``product`` at its effective price."""
    return LineItem(
        product_id=product.product_id,
        name=product.name,
        unit_price=effective_price(product, now),
        quantity=quantity,
        category=product.category,
        variant=variant,
    )
