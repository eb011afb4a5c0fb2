"""
Order-Edit Reconciler

Local working copy of a placed order's line items. Edits stay local until
save(), which sends the full replacement line set. Prices are re-snapshot
from the catalog when a line's product changes; later price drift is
accepted.

Stock is not re-validated on this path.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

import httpx

from ..core.errors import PreconditionError, to_remote_error
from ..models import Order, OrderItem, OrderStatus, Product, UserInfo
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


def can_edit(order: Order) -> bool:
    """Orders may change only before they ship"""
    return order.status in EDITABLE_STATUSES


def replace_order(orders: list[Order], updated: Order) -> None:
    """Swap an order in a list in place, matching by id"""
    for index, existing in enumerate(orders):
        if existing.id == updated.id:
            orders[index] = updated
            return


def _line_for(product: Product, quantity: int = 1) -> OrderItem:
    return OrderItem(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        price=product.price,
        total=product.price * quantity,
    )


class OrderEditSession:
    """
    Working copy of one order.

    Local operations raise PreconditionError for invalid input; save()
    raises RemoteError (with a plain string message) when the server call
    fails.
    """

    def __init__(
        self,
        order: Order,
        products: Iterable[Product],
        client: StorefrontClient,
        identity: Optional[UserInfo] = None,
        admin: bool = False,
    ):
        self.order = order
        self.products = list(products)
        self.client = client
        self.admin = admin
        self.identity = identity or UserInfo(
            name=order.user_name,
            email=order.user_email,
            phone=order.user_phone,
            address=order.user_address,
        )
        self.lines: list[OrderItem] = [item.model_copy() for item in order.items]
        self.closed = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise PreconditionError("This edit session is closed")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.lines):
            raise PreconditionError(f"No line at position {index}", field="index")

    def _product(self, product_id: str) -> Product:
        product = next((p for p in self.products if p.id == product_id), None)
        if product is None:
            raise PreconditionError(f"Unknown product: {product_id}", field="product_id")
        return product

    def update_identity(self, **fields: str) -> None:
        """Change identity fields sent with the save"""
        self._ensure_open()
        self.identity = self.identity.model_copy(update=fields)

    def add_line(self, default_product: Optional[Product] = None) -> OrderItem:
        """Append a line with quantity 1 at the product's current price"""
        self._ensure_open()
        product = default_product or (self.products[0] if self.products else None)
        if product is None:
            raise PreconditionError("No products available to add")

        line = _line_for(product)
        self.lines.append(line)
        return line

    def set_line_product(self, index: int, product_id: str) -> OrderItem:
        """Point a line at another product, re-pricing it"""
        self._ensure_open()
        self._check_index(index)
        product = self._product(product_id)

        line = _line_for(product, quantity=self.lines[index].quantity)
        self.lines[index] = line
        return line

    def set_line_quantity(self, index: int, quantity: int) -> OrderItem:
        """Set a line's quantity (at least 1)"""
        self._ensure_open()
        self._check_index(index)
        if quantity < 1:
            raise PreconditionError("Quantity must be at least 1", field="quantity")

        current = self.lines[index]
        line = current.model_copy(update={"quantity": quantity, "total": current.price * quantity})
        self.lines[index] = line
        return line

    def remove_line(self, index: int) -> None:
        """Drop a line; the last one cannot be removed"""
        self._ensure_open()
        self._check_index(index)
        if len(self.lines) <= 1:
            raise PreconditionError("An order must contain at least one item")
        del self.lines[index]

    def total(self) -> Decimal:
        return sum((line.price * line.quantity for line in self.lines), Decimal("0"))

    async def save(self, orders: Optional[list[Order]] = None) -> Order:
        """
        Send the replacement line set.

        Args:
            orders: Caller's order list, updated in place with the result

        Returns:
            The updated order as returned by the server
        """
        self._ensure_open()
        if not self.lines:
            raise PreconditionError("An order must contain at least one item")

        missing = self.identity.missing_fields(require_password=not self.admin)
        if missing:
            raise PreconditionError(f"Please fill in: {', '.join(missing)}", field=missing[0])

        try:
            if self.admin:
                updated = await self.client.admin_update_order(self.order.id, self.lines, self.identity)
            else:
                updated = await self.client.replace_order_items(self.order.id, self.lines, self.identity)
        except (httpx.HTTPError, ValueError) as e:
            error = to_remote_error(e)
            logger.error(f"Saving order {self.order.id} failed: {error.message}")
            raise error from e

        if orders is not None:
            replace_order(orders, updated)

        self.closed = True
        logger.info(f"Order {updated.id} updated: {len(updated.items)} items, total {updated.total_amount}")
        return updated

    def cancel(self) -> None:
        """Discard the working copy"""
        self.lines = []
        self.closed = True


def open_edit_session(
    order: Order,
    products: Iterable[Product],
    client: StorefrontClient,
    identity: Optional[UserInfo] = None,
    admin: bool = False,
) -> OrderEditSession:
    """Start editing an order; only pending or confirmed orders qualify"""
    if not can_edit(order):
        raise PreconditionError(f"Order {order.id} is {order.status.value} and can no longer be edited")
    return OrderEditSession(order, products, client, identity=identity, admin=admin)
