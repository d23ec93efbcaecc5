"""
Admin — identity, capability checks and the admin whitelist.

    from storefront import admin

    caps = admin.Capabilities(admin.MemoryAdminStore(), bootstrap={"owner@example.com"})
    await caps.require_admin(admin.Requester(email="owner@example.com"))  # Ok(None)
"""

from storefront.admin._types import Requester, AdminEntry, ANONYMOUS
from storefront.admin._store import AdminStore, MemoryAdminStore
from storefront.admin._sqlalchemy import SQLAlchemyAdminStore
from storefront.admin._capability import Capabilities, WhitelistAdmin

__all__ = (
    "Requester",
    "AdminEntry",
    "ANONYMOUS",
    "AdminStore",
    "MemoryAdminStore",
    "SQLAlchemyAdminStore",
    "Capabilities",
    "WhitelistAdmin",
)
