"""
Checkout Submission

Turns a validated cart plus shopper identity into an order.

    idle -> submitting -> (succeeded | failed) -> idle

Submission is single-flight: a second submit while one is outstanding is
rejected, never queued, so a double click cannot create two orders. A
failed submission leaves the cart untouched; a successful one removes the
ordered lines and keeps anything added while it was outstanding.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import httpx

from ..core.errors import (
    ErrorKind,
    PreconditionError,
    RemoteError,
    ValidationRejected,
    normalize_error,
    response_error_messages,
)
from ..core.liveness import Liveness
from ..models import CartSnapshot, Order, OrderCreateRequest, UserInfo
from .cart_engine import CartEngine
from .min_order import MinimumOrderGate
from .stock_gate import StockValidationGate, StockVerdict, ValidationMode
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)

EMPTY_CART = "Your cart is empty."
ALREADY_SUBMITTING = "Your order is already being placed."


class CheckoutState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class CheckoutResult:
    """Outcome of a checkout step"""
    succeeded: bool
    order: Optional[Order] = None
    errors: list[str] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None
    missing_fields: list[str] = field(default_factory=list)

    @property
    def order_id(self) -> Optional[str]:
        return self.order.id if self.order else None

    @property
    def message(self) -> str:
        return "; ".join(self.errors)

    @classmethod
    def failure(cls, kind: ErrorKind, errors: list[str], **kwargs) -> "CheckoutResult":
        return cls(succeeded=False, errors=errors, error_kind=kind, **kwargs)

    def raise_for_error(self) -> None:
        """Raise the matching StorefrontError if this step failed"""
        if self.succeeded:
            return
        if self.error_kind == ErrorKind.VALIDATION:
            raise ValidationRejected(self.errors)
        if self.error_kind == ErrorKind.TRANSPORT:
            raise RemoteError(self.message)
        missing = self.missing_fields[0] if self.missing_fields else None
        raise PreconditionError(self.message, field=missing)


class CheckoutSubmission:
    """Order creation from the current cart"""

    def __init__(
        self,
        engine: CartEngine,
        client: StorefrontClient,
        stock_gate: StockValidationGate,
        min_order_gate: MinimumOrderGate,
    ):
        self.engine = engine
        self.client = client
        self.stock_gate = stock_gate
        self.min_order_gate = min_order_gate
        self.state = CheckoutState.IDLE
        self.last_state: Optional[CheckoutState] = None

    @property
    def is_submitting(self) -> bool:
        return self.state == CheckoutState.SUBMITTING

    async def proceed_to_checkout(
        self,
        is_admin: bool = False,
        liveness: Optional[Liveness] = None,
    ) -> Optional[CheckoutResult]:
        """
        Gate the transition into the checkout form.

        Runs the minimum-order gate (skipped for admins) and then the
        blocking stock check. Returns None if the caller went away while
        the stock check was outstanding.
        """
        snapshot = self.engine.snapshot
        if snapshot.is_empty:
            return CheckoutResult.failure(ErrorKind.PRECONDITION, [EMPTY_CART])

        return await self._check_gates(snapshot, is_admin, liveness)

    async def submit(
        self,
        user_info: UserInfo,
        is_admin: bool = False,
        liveness: Optional[Liveness] = None,
    ) -> Optional[CheckoutResult]:
        """
        Place the order.

        Args:
            user_info: Shopper identity and lookup credential
            is_admin: Administrative context (bypasses the minimum-order gate)
            liveness: Optional guard; the result is dropped if the caller left

        Returns:
            CheckoutResult, or None when the caller is no longer alive
        """
        if self.state == CheckoutState.SUBMITTING:
            logger.warning("Checkout already in progress; ignoring duplicate submission")
            return CheckoutResult.failure(ErrorKind.IN_FLIGHT, [ALREADY_SUBMITTING])

        self.state = CheckoutState.SUBMITTING
        try:
            result = await self._submit(user_info, is_admin)
        finally:
            self.state = CheckoutState.IDLE

        self.last_state = CheckoutState.SUCCEEDED if result.succeeded else CheckoutState.FAILED
        if result.succeeded:
            logger.info(f"Order {result.order_id} created: {result.order.total_amount}")
        else:
            logger.info(f"Checkout failed ({result.error_kind.value}): {result.message}")

        if liveness is not None and not liveness.is_alive:
            logger.debug("Checkout caller went away; result not delivered")
            return None
        return result

    async def _submit(self, user_info: UserInfo, is_admin: bool) -> CheckoutResult:
        snapshot = self.engine.snapshot
        if snapshot.is_empty:
            return CheckoutResult.failure(ErrorKind.PRECONDITION, [EMPTY_CART])

        missing = user_info.missing_fields(require_password=True)
        if missing:
            return CheckoutResult.failure(
                ErrorKind.PRECONDITION,
                [f"Please fill in: {', '.join(missing)}"],
                missing_fields=missing,
            )

        gates = await self._check_gates(snapshot, is_admin)
        if not gates.succeeded:
            return gates

        request = OrderCreateRequest(user_info=user_info, items=snapshot.to_order_items())
        try:
            order = await self.client.create_order(request)
        except httpx.HTTPStatusError as e:
            messages = response_error_messages(e.response)
            if e.response.status_code == 400 and messages:
                return CheckoutResult.failure(ErrorKind.VALIDATION, messages)
            return CheckoutResult.failure(ErrorKind.TRANSPORT, [normalize_error(e)])
        except (httpx.HTTPError, ValueError) as e:
            return CheckoutResult.failure(ErrorKind.TRANSPORT, [normalize_error(e)])

        self._remove_ordered(snapshot)
        return CheckoutResult(succeeded=True, order=order)

    def _remove_ordered(self, ordered: CartSnapshot) -> None:
        """Take the ordered lines out of the cart, keeping anything added since"""
        if self.engine.snapshot.lines == ordered.lines:
            self.engine.clear_cart()
            return

        logger.info("Cart changed while the order was being placed; keeping the newer lines")
        for line in ordered.lines:
            current = self.engine.snapshot.find(line.product_id)
            if current is not None:
                self.engine.update_quantity(line.product_id, current.quantity - line.quantity)

    async def _check_gates(
        self,
        snapshot: CartSnapshot,
        is_admin: bool,
        liveness: Optional[Liveness] = None,
    ) -> Optional[CheckoutResult]:
        min_check = self.min_order_gate.evaluate(is_admin=is_admin)
        if not min_check.ok:
            return CheckoutResult.failure(ErrorKind.VALIDATION, [min_check.message])

        verdict = await self.stock_gate.validate(
            snapshot.lines,
            mode=ValidationMode.BLOCKING,
            liveness=liveness,
        )
        if verdict is None:
            return None
        if not verdict.proceed:
            return self._verdict_failure(verdict)

        return CheckoutResult(succeeded=True)

    @staticmethod
    def _verdict_failure(verdict: StockVerdict) -> CheckoutResult:
        kind = ErrorKind.TRANSPORT if verdict.transport_failed else ErrorKind.VALIDATION
        return CheckoutResult.failure(kind, list(verdict.errors))
