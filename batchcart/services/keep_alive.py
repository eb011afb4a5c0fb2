"""Periodic health ping keeping a sleeping backend awake"""

import asyncio
import logging
from typing import Optional

import httpx

from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)


class KeepAlive:
    """Pings the storefront health endpoint on an interval"""

    def __init__(self, client: StorefrontClient, interval: float = 60.0):
        self.client = client
        self.interval = interval
        self.is_running = False
        self.ping_count = 0
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Start pinging; no-op if already running"""
        if self.is_running:
            logger.debug("Keep-alive already running")
            return

        self.is_running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Keep-alive started, pinging every {self.interval}s")

    async def stop(self) -> None:
        """Stop pinging"""
        if not self.is_running:
            return

        self.is_running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Keep-alive stopped")

    async def ping(self) -> bool:
        """Send one ping; failures are logged, never raised"""
        self.ping_count += 1
        try:
            healthy = await self.client.ping()
        except httpx.HTTPError as e:
            logger.warning(f"Keep-alive ping failed: {e}")
            return False

        if not healthy:
            logger.warning("Keep-alive ping returned a non-success status")
        return healthy

    async def _loop(self) -> None:
        while self.is_running:
            await self.ping()
            await asyncio.sleep(self.interval)
