"""
Admin whitelist store.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from kungfu import Result, Ok

from storefront._types import utcnow
from storefront.errors import StorageError
from storefront.admin._types import AdminEntry


class AdminStore(Protocol):
    async def contains(self, email: str) -> Result[bool, StorageError]: ...

    async def add(self, email: str, role: str = "admin") -> Result[AdminEntry, StorageError]:
        """Add or keep an entry. Re-adding an email updates its role."""
        ...

    async def remove(self, email: str) -> Result[bool, StorageError]: ...

    async def list_all(self) -> Result[list[AdminEntry], StorageError]: ...


class MemoryAdminStore:
    def __init__(self) -> None:
        self._entries: dict[str, AdminEntry] = {}
        self._lock = asyncio.Lock()

    async def contains(self, email: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(email.lower() in self._entries)

    async def add(self, email: str, role: str = "admin") -> Result[AdminEntry, StorageError]:
        async with self._lock:
            key = email.lower()
            existing = self._entries.get(key)
            created = existing.created_at if existing else utcnow()
            entry = AdminEntry(email=key, role=role, created_at=created)
            self._entries[key] = entry
            return Ok(entry)

    async def remove(self, email: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(self._entries.pop(email.lower(), None) is not None)

    async def list_all(self) -> Result[list[AdminEntry], StorageError]:
        async with self._lock:
            return Ok(sorted(self._entries.values(), key=lambda e: e.created_at))


__all__ = ("AdminStore", "MemoryAdminStore")
