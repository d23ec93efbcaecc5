"""
Payment confirmation store — protocol and in-memory implementation.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from typing import Protocol

from kungfu import Result, Ok

from storefront._types import Decision, utcnow
from storefront.errors import StorageError
from storefront.payments._types import PaymentConfirmation


class ConfirmationStore(Protocol):
    async def add(
        self, order_id: str, screenshot_ref: str
    ) -> Result[PaymentConfirmation, StorageError]: ...

    async def get(self, confirmation_id: str) -> Result[PaymentConfirmation | None, StorageError]: ...

    async def list_by_order(self, order_id: str) -> Result[list[PaymentConfirmation], StorageError]: ...

    async def list_all(self) -> Result[list[PaymentConfirmation], StorageError]:
        """Newest first."""
        ...

    async def decide(
        self,
        confirmation_id: str,
        decision: Decision,
        reviewed_by: str | None,
        rejection_reason: str | None = None,
    ) -> Result[PaymentConfirmation | None, StorageError]:
        """
        Record the verdict on a PENDING confirmation. Ok(None) when it does
        not exist or was already decided.
        """
        ...


def _newest_first(items: list[PaymentConfirmation]) -> list[PaymentConfirmation]:
    return sorted(items, key=lambda c: c.submitted_at, reverse=True)


class MemoryConfirmationStore:
    def __init__(self) -> None:
        self._items: dict[str, PaymentConfirmation] = {}
        self._lock = asyncio.Lock()

    async def add(
        self, order_id: str, screenshot_ref: str
    ) -> Result[PaymentConfirmation, StorageError]:
        async with self._lock:
            confirmation = PaymentConfirmation(
                id=uuid.uuid4().hex,
                order_id=order_id,
                screenshot_ref=screenshot_ref,
                status=Decision.PENDING,
                submitted_at=utcnow(),
            )
            self._items[confirmation.id] = confirmation
            return Ok(confirmation)

    async def get(self, confirmation_id: str) -> Result[PaymentConfirmation | None, StorageError]:
        async with self._lock:
            return Ok(self._items.get(confirmation_id))

    async def list_by_order(self, order_id: str) -> Result[list[PaymentConfirmation], StorageError]:
        async with self._lock:
            return Ok(_newest_first([c for c in self._items.values() if c.order_id == order_id]))

    async def list_all(self) -> Result[list[PaymentConfirmation], StorageError]:
        async with self._lock:
            return Ok(_newest_first(list(self._items.values())))

    async def decide(
        self,
        confirmation_id: str,
        decision: Decision,
        reviewed_by: str | None,
        rejection_reason: str | None = None,
    ) -> Result[PaymentConfirmation | None, StorageError]:
        async with self._lock:
            current = self._items.get(confirmation_id)
            if current is None or not current.is_pending:
                return Ok(None)

            decided = replace(
                current,
                status=decision,
                reviewed_at=utcnow(),
                reviewed_by=reviewed_by,
                rejection_reason=rejection_reason,
            )
            self._items[confirmation_id] = decided
            return Ok(decided)


__all__ = ("ConfirmationStore", "MemoryConfirmationStore")
