"""
Stock Validation Gate

Sends a line set to the remote inventory check and reports the verdict.
Two call sites exist and the mode is explicit:

- BLOCKING: runs right before an order is committed. Any failure,
  including not being able to reach the server, stops the transition.
- INFORMATIONAL: opportunistic checks (opening the cart). Problems are
  reported but navigation proceeds, since nothing is committed.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

import httpx

from ..core.liveness import Liveness
from ..models import InvalidStockItem, StockValidationItem
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)

UNABLE_TO_VALIDATE = "Unable to validate stock availability. Please try again."
UNAVAILABLE_ITEMS = "Some items in your cart are no longer available."


class ValidationMode(str, Enum):
    INFORMATIONAL = "informational"
    BLOCKING = "blocking"


@dataclass
class StockVerdict:
    """Outcome of a stock check"""
    valid: bool
    proceed: bool
    errors: list[str] = field(default_factory=list)
    invalid_items: list[InvalidStockItem] = field(default_factory=list)
    transport_failed: bool = False


def to_validation_items(lines: Iterable[Any]) -> list[StockValidationItem]:
    """Map cart lines or order items to product/quantity pairs"""
    return [
        StockValidationItem(product_id=line.product_id, quantity=line.quantity)
        for line in lines
    ]


class StockValidationGate:
    """Checkpoint against server-authoritative stock levels"""

    def __init__(self, client: StorefrontClient):
        self.client = client

    async def validate(
        self,
        lines: Iterable[Any],
        mode: ValidationMode = ValidationMode.BLOCKING,
        liveness: Optional[Liveness] = None,
    ) -> Optional[StockVerdict]:
        """
        Validate candidate lines.

        Args:
            lines: Cart lines or order items (anything with product_id/quantity)
            mode: Blocking or informational call site
            liveness: Optional guard; a verdict for a departed caller is dropped

        Returns:
            The verdict, or None if the caller went away meanwhile
        """
        items = to_validation_items(lines)
        if not items:
            return StockVerdict(valid=True, proceed=True)

        if liveness is not None:
            return await liveness.deliver(self._check(items, mode))
        return await self._check(items, mode)

    async def _check(self, items: list[StockValidationItem], mode: ValidationMode) -> StockVerdict:
        informational = mode == ValidationMode.INFORMATIONAL

        try:
            result = await self.client.validate_stock(items)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Stock validation ({mode.value}) could not complete: {e}")
            return StockVerdict(
                valid=False,
                proceed=informational,
                errors=[UNABLE_TO_VALIDATE],
                transport_failed=True,
            )

        if result.valid:
            return StockVerdict(valid=True, proceed=True)

        errors = [item.error for item in result.invalid_items] or [UNAVAILABLE_ITEMS]
        logger.info(f"Stock validation ({mode.value}) rejected {len(result.invalid_items)} items")
        return StockVerdict(
            valid=False,
            proceed=informational,
            errors=errors,
            invalid_items=list(result.invalid_items),
        )
