"""In-memory storage for the mock storefront"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from batchcart.models import Category, Order, OrderItem, OrderStatus, Product, UserInfo

CATEGORIES = [
    Category(id="cat-veg", name="Vegetables", description="Weekly vegetable batches"),
    Category(id="cat-dairy", name="Dairy", description="Fresh dairy"),
]

PRODUCTS = [
    Product(
        id="prod-a",
        name="Heirloom Tomatoes",
        description="One kilo of mixed heirloom tomatoes",
        category_id="cat-veg",
        price=Decimal("100"),
        quantity=10,
    ),
    Product(
        id="prod-b",
        name="Spinach Bunch",
        description="Organic spinach",
        category_id="cat-veg",
        price=Decimal("50"),
        quantity=1,
    ),
    Product(
        id="prod-c",
        name="Paneer",
        description="Fresh cottage cheese, 250g",
        category_id="cat-dairy",
        price=Decimal("120.50"),
        quantity=5,
    ),
    Product(
        id="prod-d",
        name="Buttermilk",
        description="Spiced buttermilk",
        category_id="cat-dairy",
        price=Decimal("30"),
        quantity=0,
    ),
]


class StorefrontDatabase:
    """Products, orders and settings for one test"""

    ADMIN_USERNAME = "admin"
    ADMIN_PASSWORD = "secret"

    def __init__(self, settings: Optional[dict[str, Any]] = None):
        self.products: dict[str, Product] = {p.id: p for p in PRODUCTS}
        self.categories = list(CATEGORIES)
        self.orders: dict[str, Order] = {}
        self.passwords: dict[str, str] = {}
        self.settings: dict[str, Any] = dict(settings or {})
        self.tokens: set[str] = set()
        self.calls: list[str] = []

    def stock_errors(self, items: list[tuple[str, int]]) -> list[tuple[str, str]]:
        """(product_id, error) for every item that cannot be supplied"""
        errors = []
        for product_id, quantity in items:
            product = self.products.get(product_id)
            if product is None:
                errors.append((product_id, "Product not found"))
            elif product.quantity == 0:
                errors.append((product_id, f"{product.name} is out of stock"))
            elif quantity > product.quantity:
                errors.append((product_id, f"Only {product.quantity} left"))
        return errors

    def update_stock(self, product_id: str, delta: int) -> None:
        product = self.products[product_id]
        self.products[product_id] = product.model_copy(update={"quantity": product.quantity + delta})

    def create_order(self, user_info: UserInfo, items: list[OrderItem]) -> Order:
        now = datetime.now(timezone.utc)
        order = Order(
            id=f"ORD-{uuid.uuid4().hex[:8].upper()}",
            user_id=user_info.email,
            user_name=user_info.name,
            user_email=user_info.email,
            user_phone=user_info.phone,
            user_address=user_info.address,
            items=items,
            total_amount=sum((item.total for item in items), Decimal("0")),
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        self.passwords[order.id] = user_info.password
        return order

    def add_order(self, order: Order, password: str) -> Order:
        """Seed an order directly"""
        self.orders[order.id] = order
        self.passwords[order.id] = password
        return order

    def replace_items(self, order_id: str, items: list[OrderItem], **identity: str) -> Order:
        order = self.orders[order_id]
        update: dict[str, Any] = {
            "items": items,
            "total_amount": sum((item.price * item.quantity for item in items), Decimal("0")),
            "updated_at": datetime.now(timezone.utc),
        }
        update.update({f"user_{key}": value for key, value in identity.items() if value})
        updated = order.model_copy(update=update)
        self.orders[order_id] = updated
        return updated

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        updated = self.orders[order_id].model_copy(
            update={"status": status, "updated_at": datetime.now(timezone.utc)}
        )
        self.orders[order_id] = updated
        return updated

    def orders_for(self, email: str, password: str) -> list[Order]:
        return [
            order for order in self.orders.values()
            if order.user_email == email and self.passwords.get(order.id) == password
        ]

    def issue_token(self) -> str:
        token = uuid.uuid4().hex
        self.tokens.add(token)
        return token
