"""Cent-precision helpers for monetary amounts.

Amounts are carried as floats (the same as the ``Float`` fields on the Order
aggregate) and rounded half-up to cents at every computation boundary.
"""

from decimal import ROUND_HALF_UP, Decimal

from pos import settings

CENT = Decimal("0.01")


def round_money(value) -> float:
    """Round an amount half-up to cents, e.g. ``2.675 -> 2.68``."""
    rounded = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    # Normalise negative zero so that ``-0.0`` never leaks into totals
    return float(rounded) + 0.0


def format_money(value) -> str:
    """Render an amount the way receipts print it: ``$12.25``, ``-$5.00``."""
    amount = round_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{settings.currency_symbol()}{abs(amount):.2f}"
