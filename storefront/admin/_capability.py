"""
Capabilities — the single place that decides who is an admin.

Lifecycle transitions, coupon admin, whitelist admin and stats all ask
``require_admin`` instead of reading flags off the request.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kungfu import Result, Ok, Error

from storefront.errors import AccessDeniedError, StorageError
from storefront.admin._types import Requester, AdminEntry
from storefront.admin._store import AdminStore

logger = logging.getLogger(__name__)


class Capabilities:
    """
    Admin = email in the configured bootstrap set, or in the whitelist store.

    The bootstrap set cannot be edited at runtime, so a shop can never lock
    itself out by emptying the whitelist.
    """

    def __init__(self, store: AdminStore, bootstrap: Iterable[str] = ()) -> None:
        self._store = store
        self._bootstrap = frozenset(e.strip().lower() for e in bootstrap)

    async def is_admin(self, actor: Requester) -> Result[bool, StorageError]:
        email = actor.normalized_email
        if email is None:
            return Ok(False)
        if email in self._bootstrap:
            return Ok(True)
        return await self._store.contains(email)

    async def require_admin(
        self, actor: Requester
    ) -> Result[None, AccessDeniedError | StorageError]:
        match await self.is_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(True):
                return Ok(None)
            case Ok(_):
                logger.warning("Admin action refused for %s", actor.email or "anonymous")
                return Error(AccessDeniedError("Admin access required"))


class WhitelistAdmin:
    """Whitelist management, itself admin-only."""

    def __init__(self, store: AdminStore, capabilities: Capabilities) -> None:
        self._store = store
        self._capabilities = capabilities

    async def add(
        self, actor: Requester, email: str, role: str = "admin"
    ) -> Result[AdminEntry, AccessDeniedError | StorageError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass
        logger.info("%s added %s to the admin whitelist", actor.email, email)
        return await self._store.add(email, role)

    async def remove(
        self, actor: Requester, email: str
    ) -> Result[bool, AccessDeniedError | StorageError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass
        logger.info("%s removed %s from the admin whitelist", actor.email, email)
        return await self._store.remove(email)

    async def list(
        self, actor: Requester
    ) -> Result[list[AdminEntry], AccessDeniedError | StorageError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                return await self._store.list_all()


__all__ = ("Capabilities", "WhitelistAdmin")
