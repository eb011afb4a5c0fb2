"""Order and stock validation models"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .product import Money


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class UserInfo(BaseModel):
    """Shopper identity plus the lookup credential"""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    password: str = ""

    def missing_fields(self, require_password: bool = True) -> list[str]:
        """Names of required fields that are blank"""
        required = ["name", "email", "phone", "address"]
        if require_password:
            required.append("password")
        return [name for name in required if not getattr(self, name).strip()]


class OrderItem(BaseModel):
    """Line item snapshot stored on an order"""
    product_id: str
    product_name: str
    quantity: int = Field(gt=0)
    price: Money
    total: Money


class OrderCreateRequest(BaseModel):
    """Request to create an order"""
    user_info: UserInfo
    items: list[OrderItem]


class Order(BaseModel):
    """Placed order (server-owned)"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    user_id: Optional[str] = None
    user_name: str = ""
    user_email: str = ""
    user_phone: str = ""
    user_address: str = ""
    items: list[OrderItem] = []
    total_amount: Money = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderAnalytics(BaseModel):
    """Sales totals for one product"""
    product_id: str
    product_name: str
    total_quantity: int = 0
    total_revenue: Money = Decimal("0")


class StockValidationItem(BaseModel):
    """One product/quantity pair to check against stock"""
    product_id: str
    quantity: int


class StockValidationRequest(BaseModel):
    items: list[StockValidationItem]


class InvalidStockItem(BaseModel):
    product_id: str
    error: str


class StockValidationResult(BaseModel):
    """Remote stock verdict"""
    valid: bool
    invalid_items: list[InvalidStockItem] = []
