"""
Order lifecycle — every status change goes through here.

Transitions follow ``TRANSITIONS``; ``set_status`` is the admin override
that may move between any two statuses. Each change notifies in the
background.

Every write is a compare-and-set on the status that was checked, so two
requests racing on one order cannot both succeed:

    cancel()           PENDING                      → CANCELLED   (owner)
    admin_cancel()     PENDING | PAYMENT_PENDING    → CANCELLED   (admin)
    expire_payments()  PAYMENT_PENDING, too old     → CANCELLED   (timeout)
    begin_payment()    PENDING                      → PAYMENT_PENDING
    complete()         PAYMENT_PENDING              → COMPLETED
    fail()             any non-terminal             → FAILED
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.errors import (
    AccessDeniedError,
    InvalidStatusError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
)
from storefront.admin import Capabilities, Requester
from storefront.notify import NotificationDispatcher
from storefront.orders._types import (
    Order,
    OrderStatus,
    StatusGuard,
    can_transition,
    sources_of,
)
from storefront.orders._store import OrderStore

logger = logging.getLogger(__name__)

type LifecycleError = NotFoundError | InvalidTransitionError | StorageError


def parse_status(value: str | OrderStatus) -> Result[OrderStatus, InvalidStatusError]:
    if isinstance(value, OrderStatus):
        return Ok(value)
    try:
        return Ok(OrderStatus(value.strip().lower()))
    except ValueError:
        return Error(InvalidStatusError(value))


class OrderLifecycle:
    def __init__(
        self,
        orders: OrderStore,
        capabilities: Capabilities,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._orders = orders
        self._capabilities = capabilities
        self._dispatcher = dispatcher

    async def cancel(
        self, order_id: str, requester: Requester
    ) -> Result[Order, LifecycleError | AccessDeniedError]:
        """
        Owner cancels a pending order. Once payment has started only
        ``admin_cancel`` can stop it. Coupon usage is not given back.
        """
        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        if not order.is_owned_by(requester.email, requester.session_id, requester.user_id):
            logger.warning("Cancel of order %s refused: requester is not the owner", order_id)
            return Error(AccessDeniedError("Only the order owner can cancel it"))

        if order.status is not OrderStatus.PENDING:
            return Error(
                InvalidTransitionError(order_id, order.status.value, OrderStatus.CANCELLED.value)
            )
        return await self._write(order, OrderStatus.CANCELLED, OrderStatus.PENDING)

    async def admin_cancel(
        self, order_id: str, actor: Requester, reason: str | None = None
    ) -> Result[Order, LifecycleError | AccessDeniedError]:
        """Cancel any non-terminal order, including one awaiting payment."""
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info("%s cancels order %s: %s", actor.email, order_id, reason or "no reason given")
        return await self._transition(order_id, OrderStatus.CANCELLED)

    async def set_status(
        self, order_id: str, status: str | OrderStatus, actor: Requester
    ) -> Result[Order, LifecycleError | AccessDeniedError | InvalidStatusError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match parse_status(status):
            case Error(e):
                return Error(e)
            case Ok(target):
                pass

        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                logger.info(
                    "%s set order %s: %s → %s",
                    actor.email,
                    order_id,
                    order.status.value,
                    target.value,
                )
                # Override skips the table but not the race: the status read is the guard.
                return await self._write(order, target, order.status)

    async def begin_payment(
        self,
        order_id: str,
        payment_method: str,
        transaction_id: str | None = None,
    ) -> Result[Order, LifecycleError]:
        return await self._transition(
            order_id,
            OrderStatus.PAYMENT_PENDING,
            transaction_id=transaction_id,
            payment_method=payment_method,
        )

    async def complete(
        self, order_id: str, transaction_id: str | None = None
    ) -> Result[Order, LifecycleError]:
        return await self._transition(
            order_id, OrderStatus.COMPLETED, transaction_id=transaction_id
        )

    async def fail(self, order_id: str, reason: str) -> Result[Order, LifecycleError]:
        logger.warning("Failing order %s: %s", order_id, reason)
        return await self._transition(order_id, OrderStatus.FAILED)

    async def expire_payments(
        self, max_age: timedelta, now: datetime | None = None
    ) -> Result[list[Order], StorageError]:
        """
        Cancel orders left in PAYMENT_PENDING for longer than ``max_age``.

        Meant for a periodic job. An order that moves while the sweep runs
        is skipped, not an error.
        """
        cutoff = (now or utcnow()) - max_age
        match await self._orders.list_all():
            case Error(e):
                return Error(e)
            case Ok(orders):
                pass

        expired: list[Order] = []
        for order in orders:
            if order.status is not OrderStatus.PAYMENT_PENDING or order.updated_at > cutoff:
                continue
            match await self._write(order, OrderStatus.CANCELLED, OrderStatus.PAYMENT_PENDING):
                case Error(StorageError() as e):
                    return Error(e)
                case Error(_):
                    continue
                case Ok(cancelled):
                    expired.append(cancelled)

        if expired:
            logger.info("Expired %d unpaid orders", len(expired))
        return Ok(expired)

    # ───────────────────────────────────────────────────────────────────────────

    async def _load(self, order_id: str) -> Result[Order, NotFoundError | StorageError]:
        match await self._orders.get(order_id):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Order", order_id))
            case Ok(order):
                return Ok(order)

    async def _transition(
        self,
        order_id: str,
        target: OrderStatus,
        transaction_id: str | None = None,
        payment_method: str | None = None,
    ) -> Result[Order, LifecycleError]:
        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        if not can_transition(order.status, target):
            return Error(InvalidTransitionError(order_id, order.status.value, target.value))
        return await self._write(order, target, sources_of(target), transaction_id, payment_method)

    async def _write(
        self,
        order: Order,
        target: OrderStatus,
        expected: StatusGuard,
        transaction_id: str | None = None,
        payment_method: str | None = None,
    ) -> Result[Order, LifecycleError]:
        match await self._orders.update_status(
            order.id, target, transaction_id, payment_method, expected=expected
        ):
            case Error(e):
                return Error(e)
            case Ok(None):
                return await self._lost_race(order.id, target)
            case Ok(updated):
                logger.info("Order %s: %s → %s", order.id, order.status.value, target.value)
                self._dispatcher.status_changed(updated, target)
                return Ok(updated)

    async def _lost_race(
        self, order_id: str, target: OrderStatus
    ) -> Result[Order, LifecycleError]:
        """The guarded write matched nothing: report what the order became."""
        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(current):
                logger.warning(
                    "Order %s moved to %s before %s could apply",
                    order_id,
                    current.status.value,
                    target.value,
                )
                return Error(InvalidTransitionError(order_id, current.status.value, target.value))


__all__ = ("OrderLifecycle", "parse_status")
