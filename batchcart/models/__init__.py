# Storefront models

from .product import Product, Category, Money
from .cart import CartLine, CartSnapshot, Notification
from .checkout import (
    Order,
    OrderItem,
    OrderStatus,
    OrderCreateRequest,
    OrderAnalytics,
    UserInfo,
    StockValidationItem,
    StockValidationRequest,
    StockValidationResult,
    InvalidStockItem,
)

__all__ = [
    "Product",
    "Category",
    "Money",
    "CartLine",
    "CartSnapshot",
    "Notification",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderCreateRequest",
    "OrderAnalytics",
    "UserInfo",
    "StockValidationItem",
    "StockValidationRequest",
    "StockValidationResult",
    "InvalidStockItem",
]
