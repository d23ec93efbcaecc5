"""
Orders — checkout, lifecycle and reads.

    from storefront import orders as O

    checkout = O.CheckoutService(cart, engine, store, dispatcher, idempotency)
    lifecycle = O.OrderLifecycle(store, capabilities, dispatcher)

    order = (await checkout.place_order(O.PlaceOrder("sess-1", "steve@example.com"))).unwrap()
    await lifecycle.cancel(order.id, Requester(email="steve@example.com"))
"""

from storefront.orders._types import (
    OrderStatus,
    TERMINAL,
    TRANSITIONS,
    can_transition,
    StatusGuard,
    as_statuses,
    sources_of,
    OrderLineItem,
    OrderDraft,
    Order,
    PlaceOrder,
    OrderStats,
)
from storefront.orders._store import OrderStore, MemoryOrderStore
from storefront.orders._sqlalchemy import SQLAlchemyOrderStore
from storefront.orders._checkout import CheckoutService
from storefront.orders._lifecycle import OrderLifecycle, parse_status
from storefront.orders._queries import order_stats, find_order, orders_for, OrderAdmin

__all__ = (
    "OrderStatus",
    "TERMINAL",
    "TRANSITIONS",
    "can_transition",
    "StatusGuard",
    "as_statuses",
    "sources_of",
    "OrderLineItem",
    "OrderDraft",
    "Order",
    "PlaceOrder",
    "OrderStats",
    "OrderStore",
    "MemoryOrderStore",
    "SQLAlchemyOrderStore",
    "CheckoutService",
    "OrderLifecycle",
    "parse_status",
    "order_stats",
    "find_order",
    "orders_for",
    "OrderAdmin",
)
