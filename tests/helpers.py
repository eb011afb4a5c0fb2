"""Shared test helpers"""

from decimal import Decimal
from typing import Callable

import httpx

from batchcart.models import Product
from batchcart.services import StorefrontClient

BASE_URL = "http://testserver/api"
HEALTH_URL = "http://testserver/health"


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Records scheduled callbacks so tests decide when time passes"""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self) -> None:
        """Fire every timer that has not been cancelled"""
        for timer in list(self.timers):
            if not timer.cancelled:
                timer.callback()


def make_product(product_id: str, price: str, quantity: int = 10, name: str = None) -> Product:
    return Product(
        id=product_id,
        name=name or f"Product {product_id}",
        price=Decimal(price),
        quantity=quantity,
    )


def mock_client(handler) -> StorefrontClient:
    """Client talking to an httpx.MockTransport handler"""
    return StorefrontClient(BASE_URL, health_url=HEALTH_URL, transport=httpx.MockTransport(handler))
