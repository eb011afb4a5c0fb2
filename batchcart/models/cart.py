"""Client-side cart state"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, Optional

from .product import Product
from .checkout import OrderItem


@dataclass(frozen=True)
class CartLine:
    """One product/quantity pairing held in the cart"""
    product: Product
    quantity: int

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)

    def to_order_item(self) -> OrderItem:
        """Snapshot the line for order creation"""
        return OrderItem(
            product_id=self.product.id,
            product_name=self.product.name,
            quantity=self.quantity,
            price=self.product.price,
            total=self.subtotal,
        )


@dataclass(frozen=True)
class Notification:
    """Transient UI notice"""
    visible: bool = False
    message: str = ""


@dataclass(frozen=True)
class CartSnapshot:
    """
    Immutable view of the cart.

    ``total`` and ``item_count`` are derived from ``lines``; always build
    snapshots through :meth:`build` so they never drift.
    """
    lines: tuple[CartLine, ...] = ()
    total: Decimal = Decimal("0")
    item_count: int = 0
    min_order_value: Decimal = Decimal("0")
    notification: Notification = field(default_factory=Notification)

    @classmethod
    def build(
        cls,
        lines: Iterable[CartLine],
        min_order_value: Decimal = Decimal("0"),
        notification: Optional[Notification] = None,
    ) -> "CartSnapshot":
        lines = tuple(lines)
        return cls(
            lines=lines,
            total=sum((line.subtotal for line in lines), Decimal("0")),
            item_count=sum(line.quantity for line in lines),
            min_order_value=min_order_value,
            notification=notification or Notification(),
        )

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find(self, product_id: str) -> Optional[CartLine]:
        """Line for a product, if present"""
        return next((line for line in self.lines if line.product_id == product_id), None)

    def to_order_items(self) -> list[OrderItem]:
        return [line.to_order_item() for line in self.lines]
