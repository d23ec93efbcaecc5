"""
Cart store — protocol and in-memory implementation.

Every operation takes the session id explicitly; there is no ambient
"current cart".
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from typing import Protocol

from kungfu import Result, Ok, Error

from storefront.errors import StorageError, InvalidQuantityError
from storefront.cart._types import CartLine, is_valid_quantity


class CartStore(Protocol):
    async def get_lines(self, session_id: str) -> Result[list[CartLine], StorageError]: ...

    async def add_line(
        self, session_id: str, product_id: str, quantity: int
    ) -> Result[CartLine, InvalidQuantityError | StorageError]:
        """Add or merge: an existing (session, product) line gets ``quantity`` added."""
        ...

    async def set_quantity(
        self, line_id: str, quantity: int
    ) -> Result[CartLine | None, InvalidQuantityError | StorageError]:
        """Ok(None) when the line does not exist."""
        ...

    async def remove(self, line_id: str) -> Result[bool, StorageError]: ...

    async def clear(self, session_id: str) -> Result[None, StorageError]:
        """Drop every line of the session. Clearing an empty cart is fine."""
        ...


class MemoryCartStore:
    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}
        self._lock = asyncio.Lock()

    async def get_lines(self, session_id: str) -> Result[list[CartLine], StorageError]:
        async with self._lock:
            return Ok([l for l in self._lines.values() if l.session_id == session_id])

    async def add_line(
        self, session_id: str, product_id: str, quantity: int
    ) -> Result[CartLine, InvalidQuantityError | StorageError]:
        if not is_valid_quantity(quantity):
            return Error(InvalidQuantityError(quantity))

        async with self._lock:
            for line in self._lines.values():
                if line.session_id == session_id and line.product_id == product_id:
                    merged = replace(line, quantity=line.quantity + quantity)
                    self._lines[line.id] = merged
                    return Ok(merged)

            line = CartLine(
                id=uuid.uuid4().hex,
                session_id=session_id,
                product_id=product_id,
                quantity=quantity,
            )
            self._lines[line.id] = line
            return Ok(line)

    async def set_quantity(
        self, line_id: str, quantity: int
    ) -> Result[CartLine | None, InvalidQuantityError | StorageError]:
        if not is_valid_quantity(quantity):
            return Error(InvalidQuantityError(quantity))

        async with self._lock:
            line = self._lines.get(line_id)
            if line is None:
                return Ok(None)
            updated = replace(line, quantity=quantity)
            self._lines[line_id] = updated
            return Ok(updated)

    async def remove(self, line_id: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(self._lines.pop(line_id, None) is not None)

    async def clear(self, session_id: str) -> Result[None, StorageError]:
        async with self._lock:
            for line_id in [k for k, l in self._lines.items() if l.session_id == session_id]:
                del self._lines[line_id]
            return Ok(None)


__all__ = ("CartStore", "MemoryCartStore")
