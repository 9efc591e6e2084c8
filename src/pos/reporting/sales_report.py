"""End-of-shift sales report.

Summarises the orders of a period the way the cashier's report screen shows
them: headline totals, takings per payment method, best sellers, a category
breakdown and, for a single day, an hour-by-hour view.

Money figures follow the revenue rule of the dashboards (completed orders
only, adjustments netted in). Item and category figures ignore cancelled
orders and the synthetic lines of adjustments.
"""

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from pos.order.order import OrderStatus
from pos.pricing.cart import PaymentMethod
from pos.pricing.money import round_money
from pos.reporting.date_range import DateFilter, localize
from pos.reporting.queries import SalesQueries, revenue_of


@dataclass(frozen=True)
class ItemFigure:
    name: str
    quantity: int
    revenue: float


@dataclass(frozen=True)
class CategoryFigure:
    category: str
    quantity: int
    revenue: float


@dataclass(frozen=True)
class HourFigure:
    hour: str  # "08:00"
    transactions: int
    revenue: float


@dataclass(frozen=True)
class SalesReport:
    date_filter: str
    generated_at: datetime
    transactions: int
    completed: int
    subtotal: float
    discounts: float
    tax: float
    revenue: float
    average_transaction: float
    payment_totals: dict[str, float]
    unique_customers: int
    top_item_by_quantity: ItemFigure | None = None
    top_item_by_revenue: ItemFigure | None = None
    categories: list[CategoryFigure] = field(default_factory=list)
    hourly: list[HourFigure] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _cash_taken(order) -> float:
    # Change handed back is not takings
    if order.paid_amount is None:
        return order.total
    return min(order.paid_amount, order.total)


def _item_figures(orders):
    quantities = defaultdict(int)
    revenues = defaultdict(float)
    categories = defaultdict(lambda: [0, 0.0])

    for order in orders:
        if order.status == OrderStatus.CANCELLED.value or order.is_adjustment:
            continue
        for item in order.items:
            line_total = item.line_total
            quantities[item.name] += item.quantity
            revenues[item.name] += line_total

            category = categories[item.category or "uncategorized"]
            category[0] += item.quantity
            category[1] += line_total

    items = [ItemFigure(name, quantities[name], round_money(revenues[name])) for name in quantities]
    top_by_quantity = max(items, key=lambda figure: figure.quantity, default=None)
    top_by_revenue = max(items, key=lambda figure: figure.revenue, default=None)

    category_figures = sorted(
        (CategoryFigure(name, quantity, round_money(revenue)) for name, (quantity, revenue) in categories.items()),
        key=lambda figure: figure.revenue,
        reverse=True,
    )
    return top_by_quantity, top_by_revenue, category_figures


def _hourly_figures(orders, tz) -> list[HourFigure]:
    buckets = defaultdict(lambda: [0, 0.0])
    for order in orders:
        if order.status != OrderStatus.COMPLETED.value:
            continue
        hour = localize(order.created_at).astimezone(tz).hour
        bucket = buckets[f"{hour:02d}:00"]
        bucket[0] += 1
        bucket[1] += order.total

    return [
        HourFigure(hour, transactions, round_money(revenue)) for hour, (transactions, revenue) in sorted(buckets.items())
    ]


def build_sales_report(date_filter=DateFilter.DAY, reference=None, queries=None) -> SalesReport:
    """Build the report for the window ``date_filter`` around ``reference``."""
    date_filter = DateFilter(date_filter)
    reference = localize(reference or datetime.now(UTC))
    queries = queries or SalesQueries()

    orders = queries.orders_in_range(date_filter, reference)
    completed = [order for order in orders if order.status == OrderStatus.COMPLETED.value]
    revenue = revenue_of(orders)

    payment_totals = {method.value: 0.0 for method in PaymentMethod}
    for order in completed:
        taken = _cash_taken(order) if order.payment_method == PaymentMethod.CASH.value else order.total
        payment_totals[order.payment_method] += taken
    payment_totals = {method: round_money(amount) for method, amount in payment_totals.items()}

    top_by_quantity, top_by_revenue, categories = _item_figures(orders)

    hourly = []
    if date_filter == DateFilter.DAY:
        # Hours on the shop clock of the reference instant
        hourly = _hourly_figures(orders, reference.tzinfo)

    return SalesReport(
        date_filter=date_filter.value,
        generated_at=reference,
        transactions=len(orders),
        completed=len(completed),
        subtotal=round_money(sum(order.subtotal for order in orders)),
        discounts=round_money(sum(order.discount_amount or 0.0 for order in orders)),
        tax=round_money(sum(order.tax or 0.0 for order in orders)),
        revenue=revenue,
        average_transaction=round_money(revenue / len(completed)) if completed else 0.0,
        payment_totals=payment_totals,
        unique_customers=len({order.customer for order in orders if not order.is_adjustment}),
        top_item_by_quantity=top_by_quantity,
        top_item_by_revenue=top_by_revenue,
        categories=categories,
        hourly=hourly,
    )
