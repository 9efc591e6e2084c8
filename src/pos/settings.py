"""Runtime settings for the POS domain, read from the environment."""

import math
import os
from datetime import UTC, tzinfo
from zoneinfo import ZoneInfo

DEFAULT_TAX_RATE = 0.085


def tax_rate() -> float:
    """Sales tax rate applied at checkout (``POS_TAX_RATE``, default 8.5%)."""
    raw = os.getenv("POS_TAX_RATE")
    if raw is None or raw.strip() == "":
        return DEFAULT_TAX_RATE
    try:
        rate = float(raw)
    except ValueError:
        raise ValueError(f"POS_TAX_RATE must be a number, got {raw!r}") from None
    if not math.isfinite(rate) or rate < 0:
        raise ValueError(f"POS_TAX_RATE must be a non-negative number, got {raw!r}")
    return rate


def shop_timezone() -> tzinfo:
    """Wall-clock timezone of the shop (``POS_TIMEZONE``, default UTC).

    Naive reference instants handed to the date-scoped queries are read
    in this zone.
    """
    name = os.getenv("POS_TIMEZONE", "UTC").strip()
    if name.upper() in ("", "UTC", "Z"):
        return UTC
    return ZoneInfo(name)


def currency_symbol() -> str:
    return os.getenv("POS_CURRENCY_SYMBOL", "$")
