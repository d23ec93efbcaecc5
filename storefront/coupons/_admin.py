"""
Coupon admin — create, list, toggle, delete. Every call is capability-checked.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront.errors import (
    AccessDeniedError,
    DuplicateCouponError,
    InvalidCouponError,
    NotFoundError,
    StorageError,
)
from storefront.admin import Capabilities, Requester
from storefront.coupons._types import Coupon, CouponDraft
from storefront.coupons._rules import check_draft
from storefront.coupons._store import CouponStore

logger = logging.getLogger(__name__)

type AdminError = AccessDeniedError | StorageError


class CouponAdmin:
    def __init__(self, store: CouponStore, capabilities: Capabilities) -> None:
        self._store = store
        self._capabilities = capabilities

    async def create(
        self, actor: Requester, draft: CouponDraft
    ) -> Result[Coupon, AdminError | InvalidCouponError | DuplicateCouponError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match check_draft(draft):
            case Error(e):
                return Error(e)
            case Ok(valid):
                result = await self._store.create(valid)

        if isinstance(result, Ok):
            logger.info("Coupon %s created by %s", valid.code, actor.email)
        return result

    async def list(self, actor: Requester) -> Result[list[Coupon], AdminError]:
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                return await self._store.list_all()

    async def toggle(
        self, actor: Requester, coupon_id: str
    ) -> Result[Coupon, AdminError | NotFoundError]:
        """Flip ``is_active``. Usage history is untouched."""
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match await self._store.get(coupon_id):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Coupon", coupon_id))
            case Ok(coupon):
                pass

        match await self._store.set_active(coupon_id, not coupon.is_active):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Coupon", coupon_id))
            case Ok(updated):
                logger.info(
                    "Coupon %s %s by %s",
                    updated.code,
                    "enabled" if updated.is_active else "disabled",
                    actor.email,
                )
                return Ok(updated)

    async def delete(
        self, actor: Requester, coupon_id: str
    ) -> Result[None, AdminError | NotFoundError]:
        """Hard delete. Orders keep the code they were priced with."""
        match await self._capabilities.require_admin(actor):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match await self._store.delete(coupon_id):
            case Error(e):
                return Error(e)
            case Ok(False):
                return Error(NotFoundError("Coupon", coupon_id))
            case Ok(_):
                logger.info("Coupon %s deleted by %s", coupon_id, actor.email)
                return Ok(None)


__all__ = ("CouponAdmin",)
