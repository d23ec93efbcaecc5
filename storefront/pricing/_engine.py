"""
Pricing engine — facade over the pricing graph and coupon redemption.

    engine = PricingEngine(catalog, coupons)

    quote = await engine.price_cart(lines, "save20", PricingMode.LENIENT)
    check = await engine.validate_coupon("SAVE20", Decimal("50.00"))
    await engine.redeem_coupon("SAVE20")   # only after the order is stored
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import Decimal

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.errors import (
    CouponError,
    CouponNotFoundError,
    PricingError,
    StorageError,
)
from storefront.catalog import CatalogStore
from storefront.cart import CartLine
from storefront.coupons import Coupon, CouponQuote, CouponStore, apply_coupon, normalize_code
from storefront.pricing._types import PricingMode, PricedOrder, PricingRequest
from storefront.pricing._graph import price

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Pure pricing plus the one coupon write.

    ``price_cart`` and ``validate_coupon`` never touch store state;
    ``redeem_coupon`` is the guarded usage increment.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        coupons: CouponStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._catalog = catalog
        self._coupons = coupons
        self._clock = clock

    async def price_cart(
        self,
        lines: Sequence[CartLine],
        coupon_code: str | None = None,
        mode: PricingMode = PricingMode.STRICT,
    ) -> Result[PricedOrder, PricingError]:
        request = PricingRequest(
            lines=tuple(lines),
            coupon_code=coupon_code,
            mode=mode,
            now=self._clock(),
            catalog=self._catalog,
            coupons=self._coupons,
        )
        return await price(request)

    async def validate_coupon(
        self, code: str, order_amount: Decimal
    ) -> Result[CouponQuote, CouponError | StorageError]:
        """Strict check of a code against a bare amount (no cart)."""
        normalized = normalize_code(code)

        match await self._coupons.get_by_code(normalized):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(CouponNotFoundError(normalized or code))
            case Ok(coupon):
                return apply_coupon(coupon, order_amount, self._clock())

    async def redeem_coupon(self, code: str) -> Result[Coupon | None, StorageError]:
        """
        Count one use of ``code``.

        Ok(None) when the coupon vanished or ran out since validation: the
        order already carries its discount, so this is logged, not raised.
        """
        normalized = normalize_code(code)
        result = await self._coupons.increment_usage(normalized)

        match result:
            case Ok(None):
                logger.warning("Coupon %s not redeemed: missing or usage limit reached", normalized)
            case Ok(coupon):
                logger.info(
                    "Coupon %s redeemed (%d/%s)",
                    normalized,
                    coupon.current_usages,
                    coupon.max_usages if coupon.max_usages is not None else "unlimited",
                )
            case Error(e):
                logger.error("Coupon %s redemption failed: %s", normalized, e.message)
        return result


__all__ = ("PricingEngine",)
