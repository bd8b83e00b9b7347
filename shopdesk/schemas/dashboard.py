from decimal import Decimal

from shopdesk.schemas.common import ApiModel
from shopdesk.schemas.order import OrderSummaryOut, StatusCountOut, TrendPointOut


class DashboardStatsOut(ApiModel):
    total_products: int
    total_stock_value: Decimal
    total_stock_units: int
    low_stock_count: int
    out_of_stock_count: int
    total_orders: int
    pending_orders: int
    delivered_orders: int
    total_revenue: Decimal
    today_revenue: Decimal
    today_orders: int


class TopProductOut(ApiModel):
    product_id: int
    name: str
    sku: str
    quantity: int
    revenue: Decimal


class DashboardChartsOut(ApiModel):
    orders_by_status: list[StatusCountOut]
    revenue_trend: list[TrendPointOut]
    top_products: list[TopProductOut]


class LowStockProductOut(ApiModel):
    product_id: int
    name: str
    sku: str
    quantity: int
    min_stock_level: int


class ExpensesOut(ApiModel):
    charges: Decimal
    salaries: Decimal
    ads_costs: Decimal
    total: Decimal


class DashboardOut(ApiModel):
    stats: DashboardStatsOut
    charts: DashboardChartsOut
    recent_orders: list[OrderSummaryOut]
    low_stock_products: list[LowStockProductOut]
    expenses: ExpensesOut
