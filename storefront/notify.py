"""
Notifications — order events leave the request path here.

    dispatcher = NotificationDispatcher(LoggingNotifier())
    dispatcher.order_created(order)      # returns immediately
    await dispatcher.drain()             # shutdown / tests

A failing notifier is logged and forgotten: it never fails the request and
never rolls back the order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from storefront.orders import Order, OrderStatus

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def order_created(self, order: Order) -> None: ...

    async def status_changed(self, order: Order, status: OrderStatus) -> None: ...


class LoggingNotifier:
    """Writes one log record per event. The default sink."""

    async def order_created(self, order: Order) -> None:
        logger.info(
            "Order %s created for %s: %s (%d items)",
            order.id,
            order.email,
            order.total_amount,
            len(order.items),
        )

    async def status_changed(self, order: Order, status: OrderStatus) -> None:
        logger.info("Order %s for %s is now %s", order.id, order.email, status.value)


class NotificationDispatcher:
    """
    Fire-and-forget front for a Notifier.

    Each event becomes a background task; the dispatcher keeps a reference
    until it finishes so it is not garbage collected mid-flight.
    """

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def order_created(self, order: Order) -> None:
        self._schedule(self._notifier.order_created(order), f"order_created:{order.id}")

    def status_changed(self, order: Order, status: OrderStatus) -> None:
        self._schedule(
            self._notifier.status_changed(order, status), f"status_changed:{order.id}"
        )

    def _schedule(self, call: Awaitable[None], name: str) -> None:
        task = asyncio.create_task(self._guarded(call, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _guarded(self, call: Awaitable[None], name: str) -> None:
        try:
            await call
        except Exception:
            logger.exception("Notification %s failed", name)

    async def drain(self) -> None:
        """Wait for every scheduled notification."""
        while self._tasks:
            await asyncio.gather(*self._tasks)


__all__ = ("Notifier", "LoggingNotifier", "NotificationDispatcher")
