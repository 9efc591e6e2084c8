"""Date-scoped queries over the order store.

Every query reads one snapshot of the store and answers from it, so counts
and revenue returned together always describe the same set of orders.
Revenue counts ``completed`` orders only, adjustments included, so a refund
nets against the sale it reverses.
"""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from pos.order.order import Order, OrderStatus
from pos.pricing.money import round_money
from pos.reporting.date_range import DateFilter, date_range


@dataclass(frozen=True)
class OrderStats:
    total: int
    pending: int
    preparing: int
    ready: int
    completed: int
    cancelled: int
    revenue: float

    def to_dict(self) -> dict:
        return asdict(self)


def revenue_of(orders) -> float:
    return round_money(sum(order.total for order in orders if order.status == OrderStatus.COMPLETED.value))


def stats_of(orders) -> OrderStats:
    counts = {status: 0 for status in OrderStatus}
    for order in orders:
        counts[OrderStatus(order.status)] += 1

    return OrderStats(
        total=len(orders),
        pending=counts[OrderStatus.PENDING],
        preparing=counts[OrderStatus.PREPARING],
        ready=counts[OrderStatus.READY],
        completed=counts[OrderStatus.COMPLETED],
        cancelled=counts[OrderStatus.CANCELLED],
        revenue=revenue_of(orders),
    )


class SalesQueries:
    """Dashboard queries. Reads from ``repository`` or the domain's order store."""

    def __init__(self, repository=None):
        self._repository = repository

    @property
    def repository(self):
        return self._repository or current_domain.repository_for(Order)

    def orders_in_range(self, date_filter=DateFilter.ALL, reference: datetime | None = None) -> list[Order]:
        """Orders created inside the window, most recent first."""
        orders = self.repository.list_orders()
        window = date_range(date_filter, reference or datetime.now(UTC))
        if window is None:
            return orders
        return [order for order in orders if order.created_at is not None and order.created_at in window]

    def revenue_in_range(self, date_filter=DateFilter.ALL, reference: datetime | None = None) -> float:
        return revenue_of(self.orders_in_range(date_filter, reference))

    def stats_in_range(self, date_filter=DateFilter.ALL, reference: datetime | None = None) -> OrderStats:
        return stats_of(self.orders_in_range(date_filter, reference))

    def orders_by_status(self, status) -> list[Order]:
        return self.repository.find_by_status(status)

    def todays_orders(self, now: datetime | None = None) -> list[Order]:
        return self.orders_in_range(DateFilter.DAY, now)

    def todays_revenue(self, now: datetime | None = None) -> float:
        return self.revenue_in_range(DateFilter.DAY, now)

    def order_stats(self) -> OrderStats:
        return stats_of(self.repository.list_orders())
