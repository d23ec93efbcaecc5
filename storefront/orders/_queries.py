"""
Order reads — guest lookup, own order history, admin listing and stats.
"""

from __future__ import annotations

from collections.abc import Iterable

from kungfu import Result, Ok, Error

from storefront._types import ZERO, money
from storefront.errors import AccessDeniedError, NotFoundError, StorageError
from storefront.admin import Capabilities, Requester
from storefront.orders._types import Order, OrderStats, OrderStatus
from storefront.orders._store import OrderStore


def order_stats(orders: Iterable[Order]) -> OrderStats:
    """Revenue counts completed orders only."""
    total = 0
    completed = 0
    revenue = ZERO
    for order in orders:
        total += 1
        if order.status is OrderStatus.COMPLETED:
            completed += 1
            revenue += order.total_amount
    return OrderStats(total_orders=total, completed_orders=completed, total_revenue=money(revenue))


async def find_order(
    store: OrderStore, order_id: str, email: str
) -> Result[Order, NotFoundError | StorageError]:
    """
    Guest lookup: id plus the email the order was placed with.

    A wrong email reads as a missing order so ids cannot be guessed from the error.
    """
    match await store.get(order_id):
        case Error(e):
            return Error(e)
        case Ok(order) if order is not None and order.is_owned_by(email=email):
            return Ok(order)
        case Ok(_):
            return Error(NotFoundError("Order", order_id))


async def orders_for(
    store: OrderStore, requester: Requester
) -> Result[list[Order], StorageError]:
    """
    Orders placed under the requester's own session or account, newest first.

    Email alone is never enough here: anyone can type an address, so an
    email only unlocks a single order together with its id (``find_order``).
    """
    found: dict[str, Order] = {}
    for lookup, key in (
        (store.list_by_user, requester.user_id),
        (store.list_by_session, requester.session_id),
    ):
        if not key:
            continue
        match await lookup(key):
            case Error(e):
                return Error(e)
            case Ok(orders):
                found.update((o.id, o) for o in orders)

    return Ok(sorted(found.values(), key=lambda o: o.created_at, reverse=True))


class OrderAdmin:
    def __init__(self, store: OrderStore, capabilities: Capabilities) -> None:
        self._store = store
        self._capabilities = capabilities

    async def list(
        self, actor: Requester
    ) -> Result[list[Order], AccessDeniedError | StorageError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                return await self._store.list_all()

    async def stats(
        self, actor: Requester
    ) -> Result[OrderStats, AccessDeniedError | StorageError]:
        match await self.list(actor):
            case Error(e):
                return Error(e)
            case Ok(orders):
                return Ok(order_stats(orders))


__all__ = ("order_stats", "find_order", "orders_for", "OrderAdmin")
