"""Live order and sales schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from menu_portal.schemas.common import CamelModel, LooseStr


class OrderModifierPayload(CamelModel):
    """Modifier chosen for a line; catalog price wins when ``modifier_item_id`` resolves."""

    modifier_item_id: str | None = None
    name: str | None = None
    price: Decimal = Field(default=Decimal("0"), ge=0)


class OrderLinePayload(CamelModel):
    menu_item_id: str
    quantity: int = Field(default=1, ge=1)
    modifiers: list[OrderModifierPayload] = Field(default_factory=list)
    notes: str | None = None


class OrderCreate(CamelModel):
    """Guest order submitted through the public endpoint."""

    restaurant_id: LooseStr
    table_number: LooseStr | None = None
    customer_name: str | None = None
    notes: str | None = None
    items: list[OrderLinePayload] = Field(default_factory=list)


class OrderStatusUpdate(CamelModel):
    status: str


class LiveOrderItemResponse(CamelModel):
    id: str
    menu_item_id: str | None = None
    name: str
    quantity: int
    unit_price: float
    modifiers: list[dict[str, Any]] = Field(default_factory=list)
    line_total: float
    notes: str | None = None


class LiveOrderResponse(CamelModel):
    id: str
    restaurant_id: str
    table_number: str | None = None
    customer_name: str | None = None
    notes: str | None = None
    total_amount: float
    status: str
    placed_at: datetime
    status_updated_at: datetime | None = None
    items: list[LiveOrderItemResponse] = Field(default_factory=list)


class SaleResponse(CamelModel):
    id: str
    restaurant_id: str
    order_id: str | None = None
    table_number: str | None = None
    total_amount: float
    sale_date: datetime
    items: list[dict[str, Any]] = Field(default_factory=list)


class TopItem(CamelModel):
    item_id: str | None = None
    name: str
    quantity: int
    revenue: float


class SalesAnalytics(CamelModel):
    """Aggregates over the sales ledger for a date window."""

    total_revenue: float
    total_orders: int
    average_order_value: float
    top_items: list[TopItem] = Field(default_factory=list)
