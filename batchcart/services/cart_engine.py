"""
Cart Engine

Owns the cart for one shopping session. Each operation builds a new
immutable CartSnapshot from the previous one, recomputing totals from the
lines, and then notifies change listeners (persistence, UI badges).
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional

from ..models import CartLine, CartSnapshot, Notification, Product

logger = logging.getLogger(__name__)

ChangeListener = Callable[[CartSnapshot, CartSnapshot], None]
Scheduler = Callable[[float, Callable[[], None]], Any]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> Optional[asyncio.TimerHandle]:
    """Schedule ``callback`` on the running event loop"""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.debug("No running event loop; notification will stay until hidden")
        return None
    return loop.call_later(delay, callback)


class CartEngine:
    """
    Cart state machine.

    Operations never raise. Listener failures are logged and do not roll
    back the in-memory change.

    Usage:
        engine = CartEngine(lines=store.load())
        engine.subscribe(persist_on_change(store))
        engine.add_item(product)
    """

    def __init__(
        self,
        lines: Iterable[CartLine] = (),
        min_order_value: Decimal = Decimal("0"),
        notification_delay: float = 2.0,
        scheduler: Optional[Scheduler] = None,
    ):
        self.notification_delay = notification_delay
        self._snapshot = CartSnapshot.build(lines, min_order_value=min_order_value)
        self._scheduler = scheduler or asyncio_scheduler
        self._listeners: list[ChangeListener] = []
        # Generation counter guarding the auto-hide timer
        self._notification_token = 0
        self._hide_timer: Any = None

    @property
    def snapshot(self) -> CartSnapshot:
        """Current cart snapshot (read-only)"""
        return self._snapshot

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== Operations ====================

    def add_item(self, product: Product) -> None:
        """Add one unit of a product"""
        lines = self._snapshot.lines
        if self._snapshot.find(product.id):
            lines = tuple(
                line.with_quantity(line.quantity + 1) if line.product_id == product.id else line
                for line in lines
            )
        else:
            lines = lines + (CartLine(product=product, quantity=1),)

        notification = Notification(
            visible=True,
            message=f"{product.name} added to cart successfully!",
        )
        self._commit(lines=lines, notification=notification)
        self._schedule_hide()

    def remove_item(self, product_id: str) -> None:
        """Drop a product's line; no-op when absent"""
        lines = tuple(line for line in self._snapshot.lines if line.product_id != product_id)
        self._commit(lines=lines)

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity exactly; zero or less removes it"""
        if quantity <= 0:
            self.remove_item(product_id)
            return

        lines = tuple(
            line.with_quantity(quantity) if line.product_id == product_id else line
            for line in self._snapshot.lines
        )
        self._commit(lines=lines)

    def clear_cart(self) -> None:
        """Empty the cart and drop any notification"""
        self._cancel_hide()
        self._commit(lines=(), notification=Notification())

    def hide_notification(self) -> None:
        """Hide the notification, keeping its message"""
        self._cancel_hide()
        current = self._snapshot.notification
        self._commit(notification=Notification(visible=False, message=current.message))

    def set_min_order_value(self, value: Decimal) -> None:
        """Replace the minimum-order threshold; unusable values keep the current one"""
        try:
            threshold = Decimal(str(value))
        except InvalidOperation:
            threshold = None
        if threshold is None or not threshold.is_finite():
            logger.warning(f"Ignoring invalid minimum order value: {value!r}")
            return
        self._commit(min_order_value=threshold)

    # ==================== Internals ====================

    def _commit(
        self,
        lines: Optional[tuple[CartLine, ...]] = None,
        notification: Optional[Notification] = None,
        min_order_value: Optional[Decimal] = None,
    ) -> None:
        previous = self._snapshot
        self._snapshot = CartSnapshot.build(
            lines if lines is not None else previous.lines,
            min_order_value=min_order_value if min_order_value is not None else previous.min_order_value,
            notification=notification if notification is not None else previous.notification,
        )

        for listener in list(self._listeners):
            try:
                listener(previous, self._snapshot)
            except Exception as e:
                logger.error(f"Cart change listener failed: {e}", exc_info=True)

    def _schedule_hide(self) -> None:
        self._cancel_hide()
        token = self._notification_token

        try:
            self._hide_timer = self._scheduler(
                self.notification_delay,
                lambda: self._expire_notification(token),
            )
        except Exception as e:
            logger.warning(f"Could not schedule notification auto-hide: {e}")
            self._hide_timer = None

    def _cancel_hide(self) -> None:
        """Invalidate any pending auto-hide"""
        self._notification_token += 1
        if self._hide_timer is not None:
            cancel = getattr(self._hide_timer, "cancel", None)
            if cancel:
                cancel()
            self._hide_timer = None

    def _expire_notification(self, token: int) -> None:
        if token != self._notification_token or not self._snapshot.notification.visible:
            logger.debug("Ignoring stale notification timer")
            return

        self._hide_timer = None
        current = self._snapshot.notification
        self._commit(notification=Notification(visible=False, message=current.message))
