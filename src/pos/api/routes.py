"""FastAPI routes for the POS: checkout, the barista board and dashboards."""

import json
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, Response
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from pos import settings
from pos.api.schemas import (
    AdjustmentIdResponse,
    CheckoutRequest,
    CreateAdjustmentRequest,
    DraftOrderRequest,
    OrderIdResponse,
    OrderResponse,
    QuoteRequest,
    QuoteResponse,
    SalesReportResponse,
    SetStatusRequest,
    StatsResponse,
)
from pos.order.adjustment import CreateAdjustment
from pos.order.checkout import Checkout
from pos.order.creation import PlaceOrder
from pos.order.lifecycle import CancelOrder, SetOrderStatus
from pos.order.order import Order
from pos.pricing.cart import ManualDiscount, apply_tax, change_due, discount_label, parse_amount, price_cart
from pos.reporting.date_range import DateFilter
from pos.reporting.queries import SalesQueries
from pos.reporting.sales_report import build_sales_report

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _process(command_cls, **kwargs):
    """Build and run a command synchronously, mapping domain errors to HTTP errors."""
    try:
        return current_domain.process(command_cls(**kwargs), asynchronous=False)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.messages) from exc


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        customer=order.customer,
        items=[
            {
                "product_id": item.product_id,
                "name": item.name,
                "unit_price": item.unit_price,
                "quantity": item.quantity,
                "category": item.category,
                "variant": item.variant,
            }
            for item in order.items
        ],
        subtotal=order.subtotal,
        discount_amount=order.discount_amount or 0.0,
        discount_label=order.discount_label,
        tax=order.tax or 0.0,
        total=order.total,
        payment_method=order.payment_method,
        paid_amount=order.paid_amount,
        change_amount=order.change_amount,
        status=order.status,
        kind=order.kind,
        adjusts_order_id=order.adjusts_order_id,
        cashier_id=order.cashier_id,
        cashier_name=order.cashier_name,
        created_at=order.created_at,
        updated_at=order.updated_at,
        completed_at=order.completed_at,
    )


# ---------------------------------------------------------------------------
# Till
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def checkout(body: CheckoutRequest) -> OrderIdResponse:
    result = _process(
        Checkout,
        customer=body.customer,
        items=json.dumps([line.model_dump() for line in body.items]),
        discount_kind=body.discount_kind,
        discount_value=None if body.discount_value is None else str(body.discount_value),
        discount_label=body.discount_label,
        tax_rate=body.tax_rate,
        payment_method=body.payment_method,
        paid_amount=None if body.paid_amount is None else str(body.paid_amount),
        cashier_id=body.cashier_id,
        cashier_name=body.cashier_name,
    )
    return OrderIdResponse(order_id=result)


@order_router.post("/draft", status_code=201, response_model=OrderIdResponse)
async def place_order(body: DraftOrderRequest) -> OrderIdResponse:
    result = _process(
        PlaceOrder,
        customer=body.customer,
        items=json.dumps([line.model_dump() for line in body.items]),
        discount_amount=body.discount_amount,
        discount_label=body.discount_label,
        tax=body.tax,
        payment_method=body.payment_method,
        paid_amount=body.paid_amount,
        status=body.status,
        cashier_id=body.cashier_id,
        cashier_name=body.cashier_name,
    )
    return OrderIdResponse(order_id=result)


@order_router.post("/quote", response_model=QuoteResponse)
async def quote(body: QuoteRequest) -> QuoteResponse:
    """Live preview of the cart totals. Malformed discount text prices as no discount."""
    manual_discount = None
    if body.discount_kind:
        manual_discount = ManualDiscount(kind=body.discount_kind, value=body.discount_value)

    rate = body.tax_rate if body.tax_rate is not None else settings.tax_rate()
    totals = apply_tax(price_cart(body.items, manual_discount), rate)

    change = None
    if body.paid_amount is not None:
        change = change_due(parse_amount(body.paid_amount), totals.total)

    return QuoteResponse(
        subtotal=totals.subtotal,
        discount_amount=totals.discount_amount,
        discount_label=discount_label(manual_discount),
        tax=totals.tax,
        total=totals.total,
        change=change,
    )


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------
@order_router.get("", response_model=list[OrderResponse])
async def list_orders(
    date_filter: DateFilter = Query(DateFilter.ALL, alias="filter"),
    at: datetime | None = None,
) -> list[OrderResponse]:
    orders = SalesQueries().orders_in_range(date_filter, at)
    return [_order_response(order) for order in orders]


@order_router.get("/stats", response_model=StatsResponse)
async def order_stats(
    date_filter: DateFilter = Query(DateFilter.ALL, alias="filter"),
    at: datetime | None = None,
) -> StatsResponse:
    stats = SalesQueries().stats_in_range(date_filter, at)
    return StatsResponse(**stats.to_dict())


@order_router.get("/report", response_model=SalesReportResponse)
async def sales_report(
    date_filter: DateFilter = Query(DateFilter.DAY, alias="filter"),
    at: datetime | None = None,
) -> SalesReportResponse:
    report = build_sales_report(date_filter, at)
    return SalesReportResponse(**report.to_dict())


# ---------------------------------------------------------------------------
# Single order
# ---------------------------------------------------------------------------
@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _order_response(order)


@order_router.patch("/{order_id}/status", status_code=204)
async def set_order_status(order_id: str, body: SetStatusRequest) -> Response:
    _process(SetOrderStatus, order_id=order_id, status=body.status)
    return Response(status_code=204)


@order_router.post("/{order_id}/cancel", status_code=204)
async def cancel_order(order_id: str) -> Response:
    _process(CancelOrder, order_id=order_id)
    return Response(status_code=204)


@order_router.post("/{order_id}/adjustments", status_code=201, response_model=AdjustmentIdResponse)
async def create_adjustment(order_id: str, body: CreateAdjustmentRequest) -> AdjustmentIdResponse:
    result = _process(CreateAdjustment, order_id=order_id, amount=body.amount)
    return AdjustmentIdResponse(adjustment_id=result)
