"""
Storefront Session

Composition root: builds exactly one cart engine per shopping session and
hands it, with the gates and services around it, to whoever needs them.
"""

import logging
from typing import Optional

import httpx
from dotenv import load_dotenv

from .core.config import Settings, get_settings
from .core.liveness import Liveness
from .database import CartStore, persist_on_change
from .models import Product
from .services import (
    CartEngine,
    Catalog,
    CheckoutSubmission,
    KeepAlive,
    MinimumOrderGate,
    OrderBook,
    StockValidationGate,
    StockVerdict,
    StorefrontClient,
    ValidationMode,
)
from .services.cart_engine import Scheduler

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging"""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class Storefront:
    """One shopping session: cart engine, gates, checkout and orders"""

    def __init__(
        self,
        settings: Settings,
        client: Optional[StorefrontClient] = None,
        store: Optional[CartStore] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.settings = settings
        self.client = client or StorefrontClient.from_settings(settings)
        self.store = store or CartStore(settings.cart_store_path, key=settings.cart_storage_key)

        self.engine = CartEngine(
            lines=self.store.load(),
            min_order_value=settings.default_min_order_value,
            notification_delay=settings.notification_delay,
            scheduler=scheduler,
        )
        self.engine.subscribe(persist_on_change(self.store))

        self.catalog = Catalog(self.client)
        self.stock_gate = StockValidationGate(self.client)
        self.min_order_gate = MinimumOrderGate(
            self.engine,
            default_threshold=settings.default_min_order_value,
            setting_name=settings.min_order_setting_name,
            currency_symbol=settings.currency_symbol,
        )
        self.checkout = CheckoutSubmission(
            self.engine,
            self.client,
            self.stock_gate,
            self.min_order_gate,
        )
        self.orders = OrderBook(self.client)
        self.keep_alive = KeepAlive(self.client, interval=settings.keep_alive_interval)

    @property
    def is_admin(self) -> bool:
        return self.client.is_admin

    async def initialize(self, refresh_catalog: bool = True, keep_alive: bool = False) -> None:
        """Fetch the minimum-order threshold and, optionally, the catalog"""
        logger.info(f"{self.settings.app_name} starting up...")
        logger.info(f"Storefront API: {self.settings.api_base_url}")

        await self.min_order_gate.refresh(self.client)

        if refresh_catalog:
            try:
                await self.catalog.refresh()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Failed to load products: {e}")

        if keep_alive:
            await self.keep_alive.start()

    def add_to_cart(self, product: Product) -> bool:
        """Add a product if it is in stock"""
        if not product.in_stock:
            logger.info(f"Not adding {product.id}: out of stock")
            return False
        self.engine.add_item(product)
        return True

    async def open_cart(self, liveness: Optional[Liveness] = None) -> Optional[StockVerdict]:
        """Cart-icon check: warns about stock but never blocks navigation"""
        return await self.stock_gate.validate(
            self.engine.snapshot.lines,
            mode=ValidationMode.INFORMATIONAL,
            liveness=liveness,
        )

    async def login_admin(self, username: Optional[str] = None, password: Optional[str] = None) -> None:
        """Open an administrative session, defaulting to configured credentials"""
        await self.client.admin_login(
            username or self.settings.admin_username or "",
            password or self.settings.admin_password or "",
        )

    async def close(self) -> None:
        """Stop background work and close the HTTP client"""
        await self.keep_alive.stop()
        await self.client.close()
        logger.info(f"{self.settings.app_name} shutting down...")


async def create_storefront(
    settings: Optional[Settings] = None,
    env_file: Optional[str] = None,
    **kwargs,
) -> Storefront:
    """Load environment, configure logging and build an initialized session"""
    load_dotenv(env_file)
    settings = settings or get_settings()
    configure_logging(settings)

    storefront = Storefront(settings, **kwargs)
    await storefront.initialize()
    return storefront
