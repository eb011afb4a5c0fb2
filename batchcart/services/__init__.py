# Storefront services

from .storefront_client import StorefrontClient
from .cart_engine import CartEngine, asyncio_scheduler
from .catalog import Catalog, filter_products
from .stock_gate import StockValidationGate, StockVerdict, ValidationMode
from .min_order import MinimumOrderGate, MinOrderCheck, check
from .checkout import CheckoutSubmission, CheckoutResult, CheckoutState
from .order_editor import OrderEditSession, can_edit, open_edit_session
from .orders import OrderBook
from .keep_alive import KeepAlive

__all__ = [
    "StorefrontClient",
    "CartEngine",
    "asyncio_scheduler",
    "Catalog",
    "filter_products",
    "StockValidationGate",
    "StockVerdict",
    "ValidationMode",
    "MinimumOrderGate",
    "MinOrderCheck",
    "check",
    "CheckoutSubmission",
    "CheckoutResult",
    "CheckoutState",
    "OrderEditSession",
    "can_edit",
    "open_edit_session",
    "OrderBook",
    "KeepAlive",
]
