"""Liveness guard for responses that arrive after their consumer is gone"""

import logging
from typing import Awaitable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Liveness:
    """
    Marks whether a consumer (a page, a dialog) still wants results.

    The transport has no cancellation, so an outstanding call always
    completes; the guard only decides whether its result is delivered.
    """

    def __init__(self, name: str = "consumer"):
        self.name = name
        self._alive = True

    @property
    def is_alive(self) -> bool:
        return self._alive

    def close(self) -> None:
        """Mark the consumer as gone"""
        self._alive = False

    async def deliver(self, awaitable: Awaitable[T]) -> Optional[T]:
        """Await the call and return its result, or None if the consumer left"""
        result = await awaitable
        if not self._alive:
            logger.debug(f"Discarding stale response for {self.name}")
            return None
        return result
