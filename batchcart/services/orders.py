"""Order lookup and administration"""

import logging
from typing import Iterable, Optional

import httpx

from ..core.errors import PreconditionError, to_remote_error
from ..models import Order, OrderAnalytics, OrderStatus, Product, UserInfo
from .order_editor import OrderEditSession, open_edit_session, replace_order
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)


class OrderBook:
    """
    In-memory list of orders for the current viewer.

    Customers fill it through lookup(); administrators through load_all().
    Remote failures surface as RemoteError.
    """

    def __init__(self, client: StorefrontClient):
        self.client = client
        self.orders: list[Order] = []
        self._credentials: Optional[UserInfo] = None

    def get(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.orders if o.id == order_id), None)

    def replace(self, order: Order) -> None:
        replace_order(self.orders, order)

    async def lookup(self, email: str, password: str) -> list[Order]:
        """Fetch a customer's orders by email and password"""
        if not email.strip():
            raise PreconditionError("Please enter your email address", field="email")
        if not password.strip():
            raise PreconditionError("Please enter your password", field="password")

        try:
            orders = await self.client.get_user_orders(email, password)
        except (httpx.HTTPError, ValueError) as e:
            raise to_remote_error(e) from e

        self.orders = orders
        self._credentials = UserInfo(email=email, password=password)
        logger.info(f"Found {len(orders)} orders for {email}")
        return orders

    async def load_all(self) -> list[Order]:
        """Fetch every order (admin)"""
        try:
            self.orders = await self.client.list_all_orders()
        except (httpx.HTTPError, ValueError) as e:
            raise to_remote_error(e) from e
        return self.orders

    async def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Change an order's status (admin)"""
        try:
            order = await self.client.update_order_status(order_id, status)
        except (httpx.HTTPError, ValueError) as e:
            raise to_remote_error(e) from e
        self.replace(order)
        return order

    async def delete(self, order_id: str) -> None:
        """Delete an order (admin)"""
        try:
            await self.client.delete_order(order_id)
        except httpx.HTTPError as e:
            raise to_remote_error(e) from e
        self.orders = [o for o in self.orders if o.id != order_id]

    async def analytics(self) -> list[OrderAnalytics]:
        """Per-product sales totals (admin)"""
        try:
            return await self.client.get_order_analytics()
        except (httpx.HTTPError, ValueError) as e:
            raise to_remote_error(e) from e

    def open_edit(
        self,
        order_id: str,
        products: Iterable[Product],
        admin: bool = False,
    ) -> OrderEditSession:
        """Open an edit session for an order in this book"""
        order = self.get(order_id)
        if order is None:
            raise PreconditionError(f"Order {order_id} not found")

        identity = UserInfo(
            name=order.user_name,
            email=order.user_email,
            phone=order.user_phone,
            address=order.user_address,
            password="" if admin or self._credentials is None else self._credentials.password,
        )
        return open_edit_session(order, products, self.client, identity=identity, admin=admin)
