"""Point-of-sale bounded context: pricing, orders, refunds and sales reporting.

Handles cart pricing (catalogue promotions and manual discounts), the order
lifecycle at the counter, negative adjustment orders for refunds, and the
date-scoped queries read by every dashboard.
"""

import structlog
from protean.domain import Domain

from pos.utils.logging import configure_logging

configure_logging()

logger = structlog.get_logger(__name__)

# Domain Composition Root
pos = Domain(name="pos")
