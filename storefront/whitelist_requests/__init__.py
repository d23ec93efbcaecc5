"""
Whitelist requests — players ask for access to the Minecraft server.

    from storefront import whitelist_requests as W

    requests = W.WhitelistRequests(W.MemoryWhitelistRequestStore(), capabilities)
    request = (await requests.submit(W.WhitelistApplication("Steve_01"))).unwrap()
    await requests.approve(admin, request.id)
"""

from storefront.whitelist_requests._types import (
    USERNAME_PATTERN,
    WhitelistApplication,
    WhitelistRequest,
    validate_application,
)
from storefront.whitelist_requests._store import (
    WhitelistRequestStore,
    MemoryWhitelistRequestStore,
)
from storefront.whitelist_requests._sqlalchemy import SQLAlchemyWhitelistRequestStore
from storefront.whitelist_requests._service import WhitelistRequests

__all__ = (
    "USERNAME_PATTERN",
    "WhitelistApplication",
    "WhitelistRequest",
    "validate_application",
    "WhitelistRequestStore",
    "MemoryWhitelistRequestStore",
    "SQLAlchemyWhitelistRequestStore",
    "WhitelistRequests",
)
