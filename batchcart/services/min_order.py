"""Minimum-order gate"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from .cart_engine import CartEngine
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MinOrderCheck:
    ok: bool
    shortfall: Decimal
    message: str = ""


def check(total: Decimal, threshold: Decimal) -> MinOrderCheck:
    """Compare a total against the threshold (boundary inclusive)"""
    total = Decimal(str(total))
    threshold = Decimal(str(threshold))
    if total >= threshold:
        return MinOrderCheck(ok=True, shortfall=Decimal("0"))
    return MinOrderCheck(ok=False, shortfall=threshold - total)


def parse_threshold(value: Any) -> Optional[Decimal]:
    """Setting value as a non-negative Decimal, or None when unusable"""
    if value is None or isinstance(value, bool):
        return None
    try:
        threshold = Decimal(str(value))
    except InvalidOperation:
        return None
    if not threshold.is_finite() or threshold < 0:
        return None
    return threshold


def format_amount(value: Decimal) -> str:
    """Whole amounts without decimals, others to two places"""
    if value == value.to_integral_value():
        return f"{value.quantize(Decimal(1)):f}"
    return f"{value:.2f}"


class MinimumOrderGate:
    """
    Threshold check run at the proceed-to-checkout transition.

    The threshold is fetched once on cart initialization and cached in the
    cart snapshot. Administrators bypass the gate.
    """

    def __init__(
        self,
        engine: CartEngine,
        default_threshold: Decimal = Decimal("0"),
        setting_name: str = "min_order_value",
        currency_symbol: str = "₹",
    ):
        self.engine = engine
        self.default_threshold = default_threshold
        self.setting_name = setting_name
        self.currency_symbol = currency_symbol

    async def refresh(self, client: StorefrontClient) -> Decimal:
        """Fetch the threshold setting into the cart, falling back to the default"""
        try:
            value = await client.get_setting(self.setting_name)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Could not fetch {self.setting_name}, using default: {e}")
            value = None

        threshold = parse_threshold(value)
        if threshold is None:
            threshold = self.default_threshold
            logger.info(f"Minimum order value not set remotely, using default {threshold}")

        self.engine.set_min_order_value(threshold)
        return threshold

    def evaluate(self, is_admin: bool = False) -> MinOrderCheck:
        """Check the current cart total against the cached threshold"""
        if is_admin:
            return MinOrderCheck(ok=True, shortfall=Decimal("0"))

        snapshot = self.engine.snapshot
        result = check(snapshot.total, snapshot.min_order_value)
        if result.ok:
            return result

        symbol = self.currency_symbol
        message = (
            f"Minimum order value is {symbol}{format_amount(snapshot.min_order_value)}. "
            f"Current order total: {symbol}{snapshot.total:.2f}"
        )
        return replace(result, message=message)
