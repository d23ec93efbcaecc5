"""
Payment review — players send proof, admins approve or reject it.

    submit   order PENDING → PAYMENT_PENDING, confirmation PENDING
    approve  order PAYMENT_PENDING → COMPLETED, confirmation APPROVED
    reject   order → CANCELLED (admin cancel), confirmation REJECTED

The order transition runs first and is itself a compare-and-set, so when
two admins act on one order only the first verdict is recorded.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront._types import Decision
from storefront.errors import (
    AccessDeniedError,
    AlreadyDecidedError,
    InvalidConfirmationError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
)
from storefront.admin import Capabilities, Requester
from storefront.orders import Order, OrderLifecycle, OrderStatus, OrderStore
from storefront.payments._types import PaymentConfirmation
from storefront.payments._store import ConfirmationStore

logger = logging.getLogger(__name__)

MAX_REFERENCE_LENGTH = 2000

type ReviewError = (
    NotFoundError
    | AccessDeniedError
    | AlreadyDecidedError
    | InvalidTransitionError
    | StorageError
)


class PaymentReview:
    def __init__(
        self,
        confirmations: ConfirmationStore,
        orders: OrderStore,
        lifecycle: OrderLifecycle,
        capabilities: Capabilities,
    ) -> None:
        self._confirmations = confirmations
        self._orders = orders
        self._lifecycle = lifecycle
        self._capabilities = capabilities

    async def submit(
        self, order_id: str, requester: Requester, screenshot_ref: str
    ) -> Result[PaymentConfirmation, ReviewError | InvalidConfirmationError]:
        ref = screenshot_ref.strip()
        if not ref or len(ref) > MAX_REFERENCE_LENGTH:
            return Error(InvalidConfirmationError("A payment proof reference is required"))

        match await self._order(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        if not order.is_owned_by(requester.email, requester.session_id, requester.user_id):
            return Error(AccessDeniedError("Only the order owner can confirm payment"))

        match order.status:
            case OrderStatus.PENDING:
                match await self._lifecycle.begin_payment(order.id, order.payment_method):
                    case Error(InvalidTransitionError() as e) if (
                        e.current == OrderStatus.PAYMENT_PENDING.value
                    ):
                        pass  # a concurrent submit started payment first
                    case Error(e):
                        return Error(e)
                    case Ok(_):
                        pass
            case OrderStatus.PAYMENT_PENDING:
                pass
            case status:
                return Error(
                    InvalidTransitionError(
                        order.id, status.value, OrderStatus.PAYMENT_PENDING.value
                    )
                )

        logger.info("Payment proof submitted for order %s", order.id)
        return await self._confirmations.add(order.id, ref)

    async def approve(
        self, actor: Requester, confirmation_id: str, transaction_id: str | None = None
    ) -> Result[PaymentConfirmation, ReviewError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match await self._pending(confirmation_id):
            case Error(e):
                return Error(e)
            case Ok(confirmation):
                pass

        match await self._lifecycle.complete(confirmation.order_id, transaction_id):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info("%s approved payment for order %s", actor.email, confirmation.order_id)
        return await self._decide(confirmation_id, Decision.APPROVED, actor)

    async def reject(
        self, actor: Requester, confirmation_id: str, reason: str
    ) -> Result[PaymentConfirmation, ReviewError | InvalidConfirmationError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        if not reason.strip():
            return Error(InvalidConfirmationError("A rejection needs a reason"))

        match await self._pending(confirmation_id):
            case Error(e):
                return Error(e)
            case Ok(confirmation):
                pass

        match await self._lifecycle.admin_cancel(confirmation.order_id, actor, reason):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info("%s rejected payment for order %s", actor.email, confirmation.order_id)
        return await self._decide(confirmation_id, Decision.REJECTED, actor, reason.strip())

    async def for_order(
        self, order_id: str, requester: Requester
    ) -> Result[list[PaymentConfirmation], NotFoundError | AccessDeniedError | StorageError]:
        """Owner or admin sees every confirmation sent for an order."""
        match await self._order(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        if not order.is_owned_by(requester.email, requester.session_id, requester.user_id):
            match await self._capabilities.require_admin(requester):
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass
        return await self._confirmations.list_by_order(order_id)

    async def list(
        self, actor: Requester, pending_only: bool = False
    ) -> Result[list[PaymentConfirmation], AccessDeniedError | StorageError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match await self._confirmations.list_all():
            case Error(e):
                return Error(e)
            case Ok(items):
                return Ok([c for c in items if c.is_pending] if pending_only else items)

    # ───────────────────────────────────────────────────────────────────────────

    async def _order(self, order_id: str) -> Result[Order, NotFoundError | StorageError]:
        match await self._orders.get(order_id):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Order", order_id))
            case Ok(order):
                return Ok(order)

    async def _pending(
        self, confirmation_id: str
    ) -> Result[PaymentConfirmation, NotFoundError | AlreadyDecidedError | StorageError]:
        match await self._confirmations.get(confirmation_id):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Payment confirmation", confirmation_id))
            case Ok(confirmation) if not confirmation.is_pending:
                return Error(
                    AlreadyDecidedError(
                        "Payment confirmation", confirmation_id, confirmation.status.value
                    )
                )
            case Ok(confirmation):
                return Ok(confirmation)

    async def _decide(
        self,
        confirmation_id: str,
        decision: Decision,
        actor: Requester,
        reason: str | None = None,
    ) -> Result[PaymentConfirmation, ReviewError]:
        match await self._confirmations.decide(
            confirmation_id, decision, actor.normalized_email, reason
        ):
            case Error(e):
                return Error(e)
            case Ok(None):
                # The order already moved, so the other verdict is the one that stands.
                return Error(AlreadyDecidedError("Payment confirmation", confirmation_id, "decided"))
            case Ok(decided):
                return Ok(decided)


__all__ = ("PaymentReview", "MAX_REFERENCE_LENGTH")
