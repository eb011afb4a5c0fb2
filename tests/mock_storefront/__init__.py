# Mock storefront used as the remote collaborator in tests

from .app import create_app
from .database import StorefrontDatabase, PRODUCTS, CATEGORIES

__all__ = [
    "create_app",
    "StorefrontDatabase",
    "PRODUCTS",
    "CATEGORIES",
]
