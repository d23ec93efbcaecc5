"""
Whitelist request store — protocol and in-memory implementation.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from typing import Protocol

from kungfu import Result, Ok, Error

from storefront._types import Decision, utcnow
from storefront.errors import DuplicateWhitelistRequestError, StorageError
from storefront.whitelist_requests._types import WhitelistApplication, WhitelistRequest


class WhitelistRequestStore(Protocol):
    async def add(
        self, application: WhitelistApplication
    ) -> Result[WhitelistRequest, DuplicateWhitelistRequestError | StorageError]:
        """
        File a PENDING request. A username (case-insensitive) may have only
        one request waiting at a time.
        """
        ...

    async def get(self, request_id: str) -> Result[WhitelistRequest | None, StorageError]: ...

    async def list_all(
        self, status: Decision | None = None
    ) -> Result[list[WhitelistRequest], StorageError]:
        """Newest first, optionally only one status."""
        ...

    async def decide(
        self,
        request_id: str,
        decision: Decision,
        processed_by: str | None,
        reason: str | None = None,
    ) -> Result[WhitelistRequest | None, StorageError]:
        """Ok(None) when the request does not exist or is no longer PENDING."""
        ...


class MemoryWhitelistRequestStore:
    def __init__(self) -> None:
        self._requests: dict[str, WhitelistRequest] = {}
        self._lock = asyncio.Lock()

    async def add(
        self, application: WhitelistApplication
    ) -> Result[WhitelistRequest, DuplicateWhitelistRequestError | StorageError]:
        wanted = application.minecraft_username.lower()
        async with self._lock:
            for existing in self._requests.values():
                if existing.is_pending and existing.minecraft_username.lower() == wanted:
                    return Error(DuplicateWhitelistRequestError(application.minecraft_username))

            request = WhitelistRequest(
                id=uuid.uuid4().hex,
                minecraft_username=application.minecraft_username,
                status=Decision.PENDING,
                submitted_at=utcnow(),
                email=application.email,
                discord_username=application.discord_username,
                user_id=application.user_id,
            )
            self._requests[request.id] = request
            return Ok(request)

    async def get(self, request_id: str) -> Result[WhitelistRequest | None, StorageError]:
        async with self._lock:
            return Ok(self._requests.get(request_id))

    async def list_all(
        self, status: Decision | None = None
    ) -> Result[list[WhitelistRequest], StorageError]:
        async with self._lock:
            items = [r for r in self._requests.values() if status is None or r.status is status]
            return Ok(sorted(items, key=lambda r: r.submitted_at, reverse=True))

    async def decide(
        self,
        request_id: str,
        decision: Decision,
        processed_by: str | None,
        reason: str | None = None,
    ) -> Result[WhitelistRequest | None, StorageError]:
        async with self._lock:
            current = self._requests.get(request_id)
            if current is None or not current.is_pending:
                return Ok(None)

            decided = replace(
                current,
                status=decision,
                reason=reason,
                processed_at=utcnow(),
                processed_by=processed_by,
            )
            self._requests[request_id] = decided
            return Ok(decided)


__all__ = ("WhitelistRequestStore", "MemoryWhitelistRequestStore")
