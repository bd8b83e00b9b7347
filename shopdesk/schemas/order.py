from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator, model_validator

from shopdesk.models.orders import OrderStatus, PaymentStatus
from shopdesk.schemas.common import ApiModel, PageOut


class OrderItemIn(ApiModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(ge=1)


class OrderCreate(ApiModel):
    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(default="", max_length=20)
    customer_address: str = Field(min_length=1)
    customer_city: str | None = Field(default=None, max_length=100)
    delivery_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    items: list[OrderItemIn] = Field(min_length=1)
    notes: str | None = None

    @field_validator("customer_name", "customer_address")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class OrderUpdate(ApiModel):
    status: OrderStatus | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def ensure_change(self):
        if self.status is None and self.notes is None:
            raise ValueError("No changes provided")
        return self


class OrderStatusUpdate(ApiModel):
    status: OrderStatus


class OrderItemOut(ApiModel):
    id: int
    product_id: int
    product_name: str | None = None
    product_sku: str | None = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderOut(ApiModel):
    id: int
    order_number: str
    customer_name: str
    customer_phone: str
    customer_address: str
    customer_city: str | None
    total_amount: Decimal
    delivery_price: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    notes: str | None
    is_from_shop: bool
    created_by: int | None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemOut] = []


class OrderSummaryOut(ApiModel):
    id: int
    order_number: str
    customer_name: str
    customer_phone: str
    customer_city: str | None
    total_amount: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    is_from_shop: bool
    created_by: int | None
    created_at: datetime


class OrderListOut(PageOut):
    orders: list[OrderSummaryOut]


class OrderStatusOut(ApiModel):
    order: OrderOut
    message: str


class StatusCountOut(ApiModel):
    status: OrderStatus
    count: int


class TrendPointOut(ApiModel):
    period: str
    revenue: Decimal
    orders: int


class OrderStatsOut(ApiModel):
    total_orders: int
    pending_orders: int
    delivered_orders: int
    total_revenue: Decimal
    today_revenue: Decimal
    today_orders: int
    orders_by_status: list[StatusCountOut]
    revenue_by_month: list[TrendPointOut]


class ScanOrderCreate(ApiModel):
    order_id: int = Field(gt=0)
    delivery_company: str | None = Field(default=None, max_length=100)
    tracking_number: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class ScannedOrderOut(ApiModel):
    id: int
    order_id: int
    order_number: str | None = None
    customer_name: str | None = None
    order_status: OrderStatus | None = None
    delivery_company: str | None
    tracking_number: str | None
    scanned_by: int | None
    scanned_by_name: str | None = None
    scanned_at: datetime
    notes: str | None


class ScannedOrderListOut(PageOut):
    scans: list[ScannedOrderOut]
    today_scans: int
