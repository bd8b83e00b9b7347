from shopdesk.models.finance import AdCost, AdPlatform, Charge, ChargeType, Salary
from shopdesk.models.inventory import Product, ProductDeliveryStats, Stock, StockHistory, StockMovementType
from shopdesk.models.orders import Order, OrderItem, OrderStatus, PaymentStatus, ScannedOrder
from shopdesk.models.user import User, UserRole

__all__ = [
    "AdCost",
    "AdPlatform",
    "Charge",
    "ChargeType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "Product",
    "ProductDeliveryStats",
    "Salary",
    "ScannedOrder",
    "Stock",
    "StockHistory",
    "StockMovementType",
    "User",
    "UserRole",
]
