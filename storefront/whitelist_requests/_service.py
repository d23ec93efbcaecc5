"""
Whitelist requests — players apply, admins decide once.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront._types import Decision
from storefront.errors import (
    AccessDeniedError,
    AlreadyDecidedError,
    DuplicateWhitelistRequestError,
    InvalidWhitelistRequestError,
    NotFoundError,
    StorageError,
)
from storefront.admin import Capabilities, Requester
from storefront.whitelist_requests._types import (
    WhitelistApplication,
    WhitelistRequest,
    validate_application,
)
from storefront.whitelist_requests._store import WhitelistRequestStore

logger = logging.getLogger(__name__)

type DecideError = AccessDeniedError | NotFoundError | AlreadyDecidedError | StorageError


class WhitelistRequests:
    def __init__(self, store: WhitelistRequestStore, capabilities: Capabilities) -> None:
        self._store = store
        self._capabilities = capabilities

    async def submit(
        self, application: WhitelistApplication
    ) -> Result[
        WhitelistRequest,
        InvalidWhitelistRequestError | DuplicateWhitelistRequestError | StorageError,
    ]:
        match validate_application(application):
            case Error(e):
                return Error(e)
            case Ok(clean):
                logger.info("Whitelist request from %s", clean.minecraft_username)
                return await self._store.add(clean)

    async def list(
        self, actor: Requester, status: Decision | None = None
    ) -> Result[list[WhitelistRequest], AccessDeniedError | StorageError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                return await self._store.list_all(status)

    async def approve(
        self, actor: Requester, request_id: str, note: str | None = None
    ) -> Result[WhitelistRequest, DecideError]:
        return await self._decide(actor, request_id, Decision.APPROVED, note)

    async def reject(
        self, actor: Requester, request_id: str, reason: str
    ) -> Result[WhitelistRequest, DecideError | InvalidWhitelistRequestError]:
        if not reason.strip():
            return Error(InvalidWhitelistRequestError("A rejection needs a reason"))
        return await self._decide(actor, request_id, Decision.REJECTED, reason)

    async def _decide(
        self,
        actor: Requester,
        request_id: str,
        decision: Decision,
        reason: str | None,
    ) -> Result[WhitelistRequest, DecideError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        reason = reason.strip() if reason and reason.strip() else None
        match await self._store.decide(request_id, decision, actor.normalized_email, reason):
            case Error(e):
                return Error(e)
            case Ok(None):
                pass
            case Ok(decided):
                logger.info(
                    "%s %s whitelist request for %s",
                    actor.email,
                    decision.value,
                    decided.minecraft_username,
                )
                return Ok(decided)

        match await self._store.get(request_id):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Whitelist request", request_id))
            case Ok(current):
                return Error(
                    AlreadyDecidedError("Whitelist request", request_id, current.status.value)
                )


__all__ = ("WhitelistRequests",)
