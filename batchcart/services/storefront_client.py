"""
Storefront API Client

HTTP client for the remote storefront collaborator: catalog, stock
validation, settings, orders and the administrative order endpoints.
Administrative calls carry the bearer token obtained from admin_login.
"""

import logging
from typing import Any, Optional

import httpx

from ..core.config import Settings
from ..core.errors import PreconditionError
from ..models import (
    Category,
    Order,
    OrderAnalytics,
    OrderCreateRequest,
    OrderItem,
    OrderStatus,
    Product,
    StockValidationItem,
    StockValidationRequest,
    StockValidationResult,
    UserInfo,
)

logger = logging.getLogger(__name__)


class StorefrontClient:
    """
    Client for the storefront REST API.

    Every method raises ``httpx.HTTPError`` on transport or HTTP failures
    and ``pydantic.ValidationError`` on malformed bodies; callers decide
    how to normalize them.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        health_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize storefront client.

        Args:
            base_url: Base URL of the storefront API (including ``/api``)
            timeout: Request timeout in seconds
            health_url: Absolute URL of the health endpoint
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.health_url = health_url or f"{self.base_url}/health"
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._admin_token: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "StorefrontClient":
        """Create client from application settings"""
        return cls(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
            health_url=settings.get_health_url(),
            transport=transport,
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    @property
    def is_admin(self) -> bool:
        return self._admin_token is not None

    def _generate_headers(self, admin: bool = False) -> dict[str, str]:
        """Generate headers, including the admin bearer token when required"""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        if admin:
            if not self._admin_token:
                raise PreconditionError("Administrator login required")
            headers["Authorization"] = f"Bearer {self._admin_token}"

        return headers

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
        admin: bool = False,
    ) -> Any:
        """Make an HTTP request against the API root"""
        url = f"{self.base_url}{path}"
        headers = self._generate_headers(admin=admin)

        response = await self._http_client.request(
            method=method,
            url=url,
            headers=headers,
            json=body,
            params=params,
        )

        if response.status_code >= 400:
            logger.error(f"Request failed: {method} {path} {response.status_code} - {response.text}")
            response.raise_for_status()

        if not response.content:
            return None
        return response.json()

    # ==================== Catalog APIs ====================

    async def list_products(self, category_id: Optional[str] = None) -> list[Product]:
        """List products, optionally restricted to one category"""
        params = {"category_id": category_id} if category_id else None
        data = await self._request("GET", "/products", params=params)
        return [Product.model_validate(item) for item in data]

    async def get_product(self, product_id: str) -> Product:
        """Get product details"""
        data = await self._request("GET", f"/products/{product_id}")
        return Product.model_validate(data)

    async def list_categories(self) -> list[Category]:
        """Get product categories"""
        data = await self._request("GET", "/categories")
        return [Category.model_validate(item) for item in data]

    # ==================== Stock & Settings APIs ====================

    async def validate_stock(self, items: list[StockValidationItem]) -> StockValidationResult:
        """Check requested quantities against current stock"""
        request = StockValidationRequest(items=items)
        data = await self._request(
            "POST",
            "/stock/validate",
            body=request.model_dump(mode="json"),
        )
        return StockValidationResult.model_validate(data)

    async def get_setting(self, name: str) -> Any:
        """Get a single named setting value (None when absent)"""
        data = await self._request("GET", f"/settings/{name}")
        if not isinstance(data, dict):
            return None
        return data.get("value")

    # ==================== Order APIs ====================

    async def create_order(self, request: OrderCreateRequest) -> Order:
        """Create an order from cart lines and shopper identity"""
        data = await self._request(
            "POST",
            "/orders",
            body=request.model_dump(mode="json"),
        )
        return Order.model_validate(data)

    async def get_user_orders(self, email: str, password: str) -> list[Order]:
        """Look up a shopper's orders; the password acts as a lookup key"""
        data = await self._request(
            "POST",
            "/orders/user",
            body={"email": email, "password": password},
        )
        return [Order.model_validate(item) for item in data]

    async def replace_order_items(
        self,
        order_id: str,
        items: list[OrderItem],
        user_info: UserInfo,
    ) -> Order:
        """Replace an order's items on the customer path (credential-bearing)"""
        body = {
            "email": user_info.email,
            "password": user_info.password,
            "name": user_info.name,
            "phone": user_info.phone,
            "address": user_info.address,
            "items": [item.model_dump(mode="json") for item in items],
        }
        data = await self._request("PUT", f"/orders/{order_id}/items", body=body)
        return Order.model_validate(data)

    # ==================== Admin APIs ====================

    async def admin_login(self, username: str, password: str) -> str:
        """Authenticate as administrator and keep the bearer token"""
        data = await self._request(
            "POST",
            "/admin/login",
            body={"username": username, "password": password},
        )
        self._admin_token = data["access_token"]
        logger.info(f"Admin session opened for {username}")
        return self._admin_token

    def admin_logout(self) -> None:
        """Drop the administrator token"""
        self._admin_token = None

    async def admin_update_order(
        self,
        order_id: str,
        items: list[OrderItem],
        user_info: Optional[UserInfo] = None,
    ) -> Order:
        """Replace an order's items on the admin path (no credential)"""
        body: dict[str, Any] = {
            "items": [item.model_dump(mode="json") for item in items],
        }
        if user_info is not None:
            body["user_info"] = user_info.model_dump(mode="json", exclude={"password"})

        data = await self._request("PUT", f"/admin/orders/{order_id}", body=body, admin=True)
        return Order.model_validate(data)

    async def list_all_orders(self) -> list[Order]:
        """List every order (admin)"""
        data = await self._request("GET", "/admin/orders", admin=True)
        return [Order.model_validate(item) for item in data]

    async def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        """Update order status (admin)"""
        data = await self._request(
            "PUT",
            f"/admin/orders/{order_id}/status",
            body={"status": status.value},
            admin=True,
        )
        return Order.model_validate(data)

    async def delete_order(self, order_id: str) -> None:
        """Delete an order (admin)"""
        await self._request("DELETE", f"/admin/orders/{order_id}", admin=True)

    async def get_order_analytics(self) -> list[OrderAnalytics]:
        """Per-product sales totals (admin)"""
        data = await self._request("GET", "/admin/orders/analytics", admin=True)
        return [OrderAnalytics.model_validate(item) for item in data]

    # ==================== Health ====================

    async def ping(self) -> bool:
        """Hit the health endpoint; True when it answers 2xx"""
        response = await self._http_client.get(self.health_url)
        return response.is_success
