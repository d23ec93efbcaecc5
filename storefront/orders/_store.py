"""
Order store — typed storage protocol and in-memory implementation.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from typing import Protocol

from kungfu import Result, Ok

from storefront._types import utcnow
from storefront.errors import StorageError
from storefront.orders._types import (
    Order,
    OrderDraft,
    OrderStatus,
    StatusGuard,
    as_statuses,
)


class OrderStore(Protocol):
    async def create(self, draft: OrderDraft) -> Result[Order, StorageError]:
        """Persist a draft as a PENDING order with a fresh uuid4 hex id."""
        ...

    async def get(self, order_id: str) -> Result[Order | None, StorageError]: ...

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        transaction_id: str | None = None,
        payment_method: str | None = None,
        *,
        expected: StatusGuard | None = None,
    ) -> Result[Order | None, StorageError]:
        """
        Set status, and payment metadata when given. Items and amounts are
        never touched.

        With ``expected`` the write is a compare-and-set: it applies only
        while the stored status is one of those. Ok(None) when the order
        does not exist or the guard did not hold.
        """
        ...

    async def list_by_email(self, email: str) -> Result[list[Order], StorageError]: ...

    async def list_by_session(self, session_id: str) -> Result[list[Order], StorageError]: ...

    async def list_by_user(self, user_id: str) -> Result[list[Order], StorageError]: ...

    async def list_all(self) -> Result[list[Order], StorageError]:
        """Newest first."""
        ...


def _from_draft(draft: OrderDraft) -> Order:
    now = utcnow()
    return Order(
        id=uuid.uuid4().hex,
        email=draft.email,
        items=draft.items,
        original_amount=draft.original_amount,
        discount_amount=draft.discount_amount,
        total_amount=draft.total_amount,
        status=OrderStatus.PENDING,
        created_at=now,
        updated_at=now,
        session_id=draft.session_id,
        user_id=draft.user_id,
        player_name=draft.player_name,
        coupon_code=draft.coupon_code,
        payment_method=draft.payment_method,
    )


def _newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


class MemoryOrderStore:
    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._lock = asyncio.Lock()

    async def create(self, draft: OrderDraft) -> Result[Order, StorageError]:
        async with self._lock:
            order = _from_draft(draft)
            self._orders[order.id] = order
            return Ok(order)

    async def get(self, order_id: str) -> Result[Order | None, StorageError]:
        async with self._lock:
            return Ok(self._orders.get(order_id))

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        transaction_id: str | None = None,
        payment_method: str | None = None,
        *,
        expected: StatusGuard | None = None,
    ) -> Result[Order | None, StorageError]:
        async with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return Ok(None)
            if expected is not None and order.status not in as_statuses(expected):
                return Ok(None)

            updated = replace(
                order,
                status=status,
                transaction_id=transaction_id or order.transaction_id,
                payment_method=payment_method or order.payment_method,
                updated_at=utcnow(),
            )
            self._orders[order_id] = updated
            return Ok(updated)

    async def list_by_email(self, email: str) -> Result[list[Order], StorageError]:
        wanted = email.strip().lower()
        async with self._lock:
            return Ok(_newest_first([o for o in self._orders.values() if o.email.lower() == wanted]))

    async def list_by_session(self, session_id: str) -> Result[list[Order], StorageError]:
        async with self._lock:
            return Ok(
                _newest_first([o for o in self._orders.values() if o.session_id == session_id])
            )

    async def list_by_user(self, user_id: str) -> Result[list[Order], StorageError]:
        async with self._lock:
            return Ok(_newest_first([o for o in self._orders.values() if o.user_id == user_id]))

    async def list_all(self) -> Result[list[Order], StorageError]:
        async with self._lock:
            return Ok(_newest_first(list(self._orders.values())))


__all__ = ("OrderStore", "MemoryOrderStore")
