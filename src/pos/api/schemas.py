"""Pydantic request/response schemas for the POS API.

These are external contracts for the till and the dashboards, kept separate
from the internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    category: str | None = None
    variant: str | None = None


class OrderLineSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float  # negative on adjustment lines
    quantity: int
    category: str | None = None
    variant: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    customer: str = "Walk-in Customer"
    items: list[CartLineSchema]
    discount_kind: str | None = None
    discount_value: str | float | None = None
    discount_label: str | None = None
    tax_rate: float | None = Field(default=None, ge=0)
    payment_method: str
    paid_amount: str | float | None = None
    cashier_id: str
    cashier_name: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer": "Ana",
                    "items": [
                        {
                            "product_id": "latte",
                            "name": "Latte",
                            "unit_price": 4.0,
                            "quantity": 2,
                            "category": "coffee",
                        }
                    ],
                    "discount_kind": "percent",
                    "discount_value": "10",
                    "payment_method": "cash",
                    "paid_amount": "20",
                    "cashier_id": "c-01",
                    "cashier_name": "Sam",
                }
            ]
        }
    }


class QuoteRequest(BaseModel):
    items: list[CartLineSchema] = Field(default_factory=list)
    discount_kind: str | None = None
    discount_value: str | float | None = None
    tax_rate: float | None = Field(default=None, ge=0)
    paid_amount: str | float | None = None


class DraftOrderRequest(BaseModel):
    customer: str
    items: list[CartLineSchema]
    discount_amount: float = 0.0
    discount_label: str | None = None
    tax: float = 0.0
    payment_method: str
    paid_amount: float | None = None
    status: str = "pending"
    cashier_id: str
    cashier_name: str


class SetStatusRequest(BaseModel):
    status: str


class CreateAdjustmentRequest(BaseModel):
    amount: float


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class AdjustmentIdResponse(BaseModel):
    adjustment_id: str


class QuoteResponse(BaseModel):
    subtotal: float
    discount_amount: float
    discount_label: str | None = None
    tax: float
    total: float
    change: float | None = None


class OrderResponse(BaseModel):
    id: str
    customer: str
    items: list[OrderLineSchema]
    subtotal: float
    discount_amount: float
    discount_label: str | None = None
    tax: float
    total: float
    payment_method: str
    paid_amount: float | None = None
    change_amount: float | None = None
    status: str
    kind: str
    adjusts_order_id: str | None = None
    cashier_id: str
    cashier_name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None


class StatsResponse(BaseModel):
    total: int
    pending: int
    preparing: int
    ready: int
    completed: int
    cancelled: int
    revenue: float


class ItemFigureSchema(BaseModel):
    name: str
    quantity: int
    revenue: float


class CategoryFigureSchema(BaseModel):
    category: str
    quantity: int
    revenue: float


class HourFigureSchema(BaseModel):
    hour: str
    transactions: int
    revenue: float


class SalesReportResponse(BaseModel):
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
    top_item_by_quantity: ItemFigureSchema | None = None
    top_item_by_revenue: ItemFigureSchema | None = None
    categories: list[CategoryFigureSchema] = Field(default_factory=list)
    hourly: list[HourFigureSchema] = Field(default_factory=list)
