"""Repository for the Order aggregate."""

from pos.domain import pos
from pos.order.order import Order, OrderStatus

# The memory provider caps unbounded queries, so reads walk the store in pages
_PAGE_SIZE = 100


@pos.repository(part_of=Order)
class OrderRepository:
    """Order store reads. All lists are fresh snapshots, most recent first.

    ``get`` and ``add`` come from the base repository; ``get`` raises
    ``ObjectNotFoundError`` for an unknown id.
    """

    def _fetch(self, **filters) -> list[Order]:
        orders = []
        offset = 0
        while True:
            query = self._dao.query.filter(**filters) if filters else self._dao.query
            page = query.order_by("-sequence").offset(offset).limit(_PAGE_SIZE).all()
            orders.extend(page.items)
            if len(page.items) < _PAGE_SIZE:
                return orders
            offset += _PAGE_SIZE

    def list_orders(self) -> list[Order]:
        return self._fetch()

    def find_by_status(self, status) -> list[Order]:
        status = OrderStatus(status).value
        return self._fetch(status=status)

    def adjustments_for(self, order_id: str) -> list[Order]:
        """Adjustment orders booked against ``order_id``."""
        return self._fetch(adjusts_order_id=order_id)
