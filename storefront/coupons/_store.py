"""
Coupon store — typed storage protocol and in-memory implementation.

``increment_usage`` is the only write on the checkout path. It must be
atomic with its guard: check ``current_usages < max_usages`` and increment
as one step, so N concurrent redemptions of a coupon with one use left
produce exactly one success.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from typing import Protocol

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.errors import StorageError, DuplicateCouponError
from storefront.coupons._types import Coupon, CouponDraft


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CouponStore(Protocol):
    async def get_by_code(self, code: str) -> Result[Coupon | None, StorageError]:
        """Lookup by normalized code. Ok(None) if absent."""
        ...

    async def increment_usage(self, code: str) -> Result[Coupon | None, StorageError]:
        """
        Atomically bump ``current_usages`` unless the limit is reached.

        Returns Ok(updated) on success, Ok(None) if the coupon is absent or
        exhausted. Never increments past ``max_usages``.
        """
        ...

    async def get(self, coupon_id: str) -> Result[Coupon | None, StorageError]: ...

    async def list_all(self) -> Result[list[Coupon], StorageError]: ...

    async def create(
        self, draft: CouponDraft
    ) -> Result[Coupon, DuplicateCouponError | StorageError]: ...

    async def set_active(
        self, coupon_id: str, active: bool
    ) -> Result[Coupon | None, StorageError]: ...

    async def delete(self, coupon_id: str) -> Result[bool, StorageError]: ...


def _from_draft(draft: CouponDraft) -> Coupon:
    now = utcnow()
    return Coupon(
        id=uuid.uuid4().hex,
        code=draft.code,
        discount_type=draft.discount_type,
        discount_value=draft.discount_value,
        valid_from=draft.valid_from,
        valid_until=draft.valid_until,
        created_at=now,
        updated_at=now,
        minimum_order_amount=draft.minimum_order_amount,
        max_usages=draft.max_usages,
        current_usages=0,
        is_active=draft.is_active,
        description=draft.description,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCouponStore:
    """
    In-memory coupon store.

    One ``asyncio.Lock`` serializes every read and usage increment;
    that is enough for a single process and nothing more.
    """

    def __init__(self, coupons: list[Coupon] | None = None) -> None:
        self._coupons: dict[str, Coupon] = {c.id: c for c in coupons or []}
        self._lock = asyncio.Lock()

    def _find(self, code: str) -> Coupon | None:
        for coupon in self._coupons.values():
            if coupon.code == code:
                return coupon
        return None

    async def get_by_code(self, code: str) -> Result[Coupon | None, StorageError]:
        async with self._lock:
            return Ok(self._find(code))

    async def increment_usage(self, code: str) -> Result[Coupon | None, StorageError]:
        async with self._lock:
            coupon = self._find(code)
            if coupon is None or coupon.is_exhausted:
                return Ok(None)

            updated = replace(
                coupon,
                current_usages=coupon.current_usages + 1,
                updated_at=utcnow(),
            )
            self._coupons[coupon.id] = updated
            return Ok(updated)

    async def get(self, coupon_id: str) -> Result[Coupon | None, StorageError]:
        async with self._lock:
            return Ok(self._coupons.get(coupon_id))

    async def list_all(self) -> Result[list[Coupon], StorageError]:
        async with self._lock:
            return Ok(sorted(self._coupons.values(), key=lambda c: c.created_at, reverse=True))

    async def create(
        self, draft: CouponDraft
    ) -> Result[Coupon, DuplicateCouponError | StorageError]:
        async with self._lock:
            if self._find(draft.code) is not None:
                return Error(DuplicateCouponError(draft.code))
            coupon = _from_draft(draft)
            self._coupons[coupon.id] = coupon
            return Ok(coupon)

    async def set_active(
        self, coupon_id: str, active: bool
    ) -> Result[Coupon | None, StorageError]:
        async with self._lock:
            coupon = self._coupons.get(coupon_id)
            if coupon is None:
                return Ok(None)
            updated = replace(coupon, is_active=active, updated_at=utcnow())
            self._coupons[coupon_id] = updated
            return Ok(updated)

    async def delete(self, coupon_id: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(self._coupons.pop(coupon_id, None) is not None)


__all__ = ("CouponStore", "MemoryCouponStore")
