"""Application tests for the end-of-shift sales report."""

import json
from datetime import UTC, datetime

from protean import current_domain

from pos.order.adjustment import CreateAdjustment
from pos.order.creation import PlaceOrder
from pos.reporting.date_range import DateFilter
from pos.reporting.sales_report import build_sales_report


def _place_order(lines, payment_method="card", paid_amount=None, status="completed", customer="Ana"):
    command = PlaceOrder(
        customer=customer,
        items=json.dumps(lines),
        payment_method=payment_method,
        paid_amount=paid_amount,
        status=status,
        cashier_id="c-01",
        cashier_name="Sam",
    )
    return current_domain.process(command, asynchronous=False)


LATTE = {"product_id": "latte", "name": "Latte", "unit_price": 4.0, "category": "coffee"}
MUFFIN = {"product_id": "muffin", "name": "Muffin", "unit_price": 2.5, "category": "pastry"}


def _seed():
    _place_order([{**LATTE, "quantity": 2}], payment_method="cash", paid_amount=10.0, customer="Ana")
    _place_order([{**MUFFIN, "quantity": 4}], payment_method="card", customer="Ben")
    _place_order([{**LATTE, "quantity": 5}], status="cancelled", customer="Cy")
    return _place_order([{**LATTE, "quantity": 1}], status="pending", customer="Ana")


class TestSalesReport:
    def test_headline_figures(self):
        _seed()
        report = build_sales_report(DateFilter.ALL)

        assert report.transactions == 4
        assert report.completed == 2
        assert report.revenue == 18.0
        assert report.average_transaction == 9.0
        assert report.unique_customers == 3

    def test_cash_counts_what_was_kept(self):
        _seed()
        report = build_sales_report(DateFilter.ALL)
        assert report.payment_totals == {"cash": 8.0, "card": 10.0, "digital": 0.0}

    def test_top_items_ignore_cancelled_orders(self):
        _seed()
        report = build_sales_report(DateFilter.ALL)
        assert report.top_item_by_quantity.name == "Muffin"
        assert report.top_item_by_quantity.quantity == 4
        assert report.top_item_by_revenue.name == "Latte"
        assert report.top_item_by_revenue.revenue == 12.0

    def test_categories(self):
        _seed()
        categories = {figure.category: figure for figure in build_sales_report(DateFilter.ALL).categories}
        assert categories["coffee"].quantity == 3
        assert categories["pastry"].revenue == 10.0

    def test_adjustments_net_revenue_but_not_items(self):
        order_id = _place_order([{**LATTE, "quantity": 2}])
        current_domain.process(CreateAdjustment(order_id=order_id, amount=3.0), asynchronous=False)

        report = build_sales_report(DateFilter.ALL)
        assert report.revenue == 5.0
        assert [figure.category for figure in report.categories] == ["coffee"]

    def test_hourly_breakdown_for_a_day(self):
        _seed()
        report = build_sales_report(DateFilter.DAY, datetime.now(UTC))
        assert sum(figure.transactions for figure in report.hourly) == 2
        assert round(sum(figure.revenue for figure in report.hourly), 2) == 18.0

    def test_no_hourly_breakdown_for_longer_periods(self):
        _seed()
        assert build_sales_report(DateFilter.MONTH, datetime.now(UTC)).hourly == []

    def test_empty_period(self):
        report = build_sales_report(DateFilter.DAY, datetime(2001, 1, 1, tzinfo=UTC))
        assert report.transactions == 0
        assert report.average_transaction == 0.0
        assert report.top_item_by_quantity is None
