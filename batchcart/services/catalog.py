"""Catalog snapshot: products and categories as of the last fetch"""

import asyncio
import logging
from typing import Optional

from ..models import Category, Product
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)


def filter_products(
    products: list[Product],
    category_id: Optional[str] = None,
    search: str = "",
) -> list[Product]:
    """Filter by category and a case-insensitive name/description match"""
    result = list(products)

    if category_id:
        result = [p for p in result if p.category_id == category_id]

    term = search.strip().lower()
    if term:
        result = [
            p for p in result
            if term in p.name.lower() or term in p.description.lower()
        ]

    return result


class Catalog:
    """Read-only cache of remote catalog data; may be stale"""

    def __init__(self, client: StorefrontClient):
        self.client = client
        self.products: list[Product] = []
        self.categories: list[Category] = []

    async def refresh(self) -> None:
        """Fetch products and categories concurrently"""
        categories, products = await asyncio.gather(
            self.client.list_categories(),
            self.client.list_products(),
            return_exceptions=True,
        )
        for result in (categories, products):
            if isinstance(result, BaseException):
                raise result

        self.categories = categories
        self.products = products
        logger.info(f"Catalog refreshed: {len(products)} products, {len(categories)} categories")

    def get(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def filter(self, category_id: Optional[str] = None, search: str = "") -> list[Product]:
        return filter_products(self.products, category_id=category_id, search=search)
