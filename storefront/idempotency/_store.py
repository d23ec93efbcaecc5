"""
Idempotency store — typed storage protocol and in-memory implementation.

All methods return Result for explicit error handling.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import timedelta
from typing import Protocol

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.errors import StorageError
from storefront.idempotency._types import RecordState, IdempotencyRecord


class IdempotencyStore(Protocol):
    async def get(self, key: str) -> Result[IdempotencyRecord | None, StorageError]:
        """Ok(None) if the key was never claimed or was released."""
        ...

    async def claim(
        self,
        key: str,
        input_hash: str | None,
        ttl: timedelta | None,
    ) -> Result[bool, StorageError]:
        """
        Atomically create a PENDING record.

        Ok(True) if this caller now owns the key, Ok(False) if a live record
        exists. An expired record is replaced.
        """
        ...

    async def complete(self, key: str, reference: str) -> Result[None, StorageError]: ...

    async def release(self, key: str) -> Result[bool, StorageError]:
        """Delete the record so the key can be used again."""
        ...


class MemoryIdempotencyStore:
    """Single-process store for tests and the in-memory wiring."""

    def __init__(self) -> None:
        self._records: dict[str, IdempotencyRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Result[IdempotencyRecord | None, StorageError]:
        async with self._lock:
            return Ok(self._records.get(key))

    async def claim(
        self,
        key: str,
        input_hash: str | None,
        ttl: timedelta | None,
    ) -> Result[bool, StorageError]:
        async with self._lock:
            existing = self._records.get(key)
            if existing is not None and not existing.is_expired:
                return Ok(False)

            now = utcnow()
            self._records[key] = IdempotencyRecord(
                key=key,
                state=RecordState.PENDING,
                reference=None,
                input_hash=input_hash,
                created_at=now,
                expires_at=now + ttl if ttl else None,
            )
            return Ok(True)

    async def complete(self, key: str, reference: str) -> Result[None, StorageError]:
        async with self._lock:
            existing = self._records.get(key)
            if existing is None:
                return Error(StorageError(f"No pending record for key: {key}"))
            self._records[key] = replace(
                existing, state=RecordState.COMPLETED, reference=reference
            )
            return Ok(None)

    async def release(self, key: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(self._records.pop(key, None) is not None)


__all__ = ("IdempotencyStore", "MemoryIdempotencyStore")
