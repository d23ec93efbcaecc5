"""
Checkout — cart to stored order.

    service = CheckoutService(cart, engine, orders, dispatcher, idempotency)
    match await service.place_order(PlaceOrder("sess-1", "steve@example.com",
                                               coupon_code="SAVE20",
                                               idempotency_key=key)):
        case Ok(order): ...
        case Error(e): ...

Order of effects: price (lenient) → store order → redeem coupon → clear
cart → notify. Nothing after the order row is written can undo it.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from kungfu import Result, Ok, Error

from storefront.errors import CheckoutError, StorageError
from storefront.cart import CartStore
from storefront.pricing import PricingEngine, PricingMode, PricedOrder
from storefront.idempotency import (
    IdempotencySpec,
    IdempotencyStore,
    fingerprint,
    run_idempotent,
)
from storefront.notify import NotificationDispatcher
from storefront.orders._types import Order, OrderDraft, OrderLineItem, PlaceOrder
from storefront.orders._store import OrderStore

logger = logging.getLogger(__name__)


class CheckoutService:
    def __init__(
        self,
        cart: CartStore,
        engine: PricingEngine,
        orders: OrderStore,
        dispatcher: NotificationDispatcher,
        idempotency: IdempotencyStore | None = None,
        idempotency_ttl: timedelta | None = None,
    ) -> None:
        self._cart = cart
        self._engine = engine
        self._orders = orders
        self._dispatcher = dispatcher
        self._idempotency = idempotency
        self._idempotency_ttl = idempotency_ttl

    async def place_order(self, request: PlaceOrder) -> Result[Order, CheckoutError]:
        """
        Turn the session's cart into an order.

        With ``idempotency_key`` a retry of the same request returns the
        order created the first time; the coupon is redeemed only once.
        """
        if request.idempotency_key is None or self._idempotency is None:
            return await self._place(request)

        spec = IdempotencySpec(
            key=request.idempotency_key,
            operation=lambda: self._place(request),
            identify=lambda order: order.id,
            replay=self._orders.get,
            store=self._idempotency,
            input_hash=fingerprint(request.fingerprint_payload()),
            ttl=self._idempotency_ttl,
        )
        match await run_idempotent(spec):
            case Ok(outcome):
                return Ok(outcome.value)
            case Error(e):
                return Error(e)

    async def _place(self, request: PlaceOrder) -> Result[Order, CheckoutError]:
        match await self._cart.get_lines(request.session_id):
            case Error(e):
                return Error(e)
            case Ok(lines):
                pass

        match await self._engine.price_cart(lines, request.coupon_code, PricingMode.LENIENT):
            case Error(e):
                return Error(e)
            case Ok(quote):
                pass

        match await self._orders.create(_draft(request, quote)):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        logger.info(
            "Order %s placed by %s: %s (discount %s)",
            order.id,
            order.email,
            order.total_amount,
            order.discount_amount,
        )

        if quote.applied_coupon_code is not None:
            # Logged by the engine; the order keeps its discount either way
            await self._engine.redeem_coupon(quote.applied_coupon_code)

        await self._clear_cart(request.session_id, order.id)
        self._dispatcher.order_created(order)
        return Ok(order)

    async def _clear_cart(self, session_id: str, order_id: str) -> None:
        result: Result[None, StorageError] = await self._cart.clear(session_id)
        if isinstance(result, Error):
            logger.error(
                "Cart %s not cleared after order %s: %s",
                session_id,
                order_id,
                result.error.message,
            )


def _draft(request: PlaceOrder, quote: PricedOrder) -> OrderDraft:
    return OrderDraft(
        email=request.email.strip(),
        items=tuple(
            OrderLineItem(
                product_id=line.product.id,
                product_name=line.product.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line.total_price,
            )
            for line in quote.lines
        ),
        original_amount=quote.original_amount,
        discount_amount=quote.discount_amount,
        total_amount=quote.final_amount,
        session_id=request.session_id,
        user_id=request.user_id,
        player_name=request.player_name,
        coupon_code=quote.applied_coupon_code,
        payment_method=request.payment_method,
    )


__all__ = ("CheckoutService",)
