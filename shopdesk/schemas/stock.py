from datetime import datetime
from decimal import Decimal

from pydantic import Field

from shopdesk.models.inventory import StockMovementType
from shopdesk.schemas.common import ApiModel, PageOut


class StockMoveRequest(ApiModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(gt=0)
    reason: str | None = Field(default=None, max_length=500)


class StockSettingsUpdate(ApiModel):
    min_stock_level: int | None = Field(default=None, ge=0)
    warehouse_location: str | None = Field(default=None, max_length=100)


class StockOut(ApiModel):
    id: int
    product_id: int
    quantity: int
    warehouse_location: str | None
    min_stock_level: int
    last_updated: datetime


class StockItemOut(StockOut):
    product_name: str
    product_sku: str
    product_barcode: str | None
    selling_price: Decimal
    cost_price: Decimal
    is_low_stock: bool
    is_out_of_stock: bool


class StockStatsOut(ApiModel):
    total_products: int
    total_units: int
    low_stock_count: int
    out_of_stock_count: int
    total_value: Decimal


class StockListOut(ApiModel):
    stock: list[StockItemOut]
    stats: StockStatsOut


class StockMoveOut(ApiModel):
    stock: StockOut
    message: str


class StockHistoryOut(ApiModel):
    id: int
    product_id: int
    product_name: str | None = None
    product_sku: str | None = None
    quantity_change: int
    type: StockMovementType
    reason: str | None
    previous_quantity: int
    new_quantity: int
    created_by: int | None
    created_by_name: str | None = None
    created_at: datetime


class StockHistoryListOut(PageOut):
    history: list[StockHistoryOut]
