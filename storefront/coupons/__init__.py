"""
Coupons — discount codes, their rules, storage and admin.

    from storefront import coupons as CP

    match CP.apply_coupon(coupon, Decimal("50.00"), now):
        case Ok(quote): quote.discount_amount   # Decimal("10.00") for 20%
        case Error(e): e.code                   # e.g. "COUPON_EXPIRED"
"""

from storefront.coupons._types import DiscountType, Coupon, CouponDraft, CouponQuote
from storefront.coupons._rules import (
    normalize_code,
    check_coupon,
    compute_discount,
    apply_coupon,
    check_draft,
)
from storefront.coupons._store import CouponStore, MemoryCouponStore
from storefront.coupons._sqlalchemy import SQLAlchemyCouponStore
from storefront.coupons._admin import CouponAdmin

__all__ = (
    "DiscountType",
    "Coupon",
    "CouponDraft",
    "CouponQuote",
    "normalize_code",
    "check_coupon",
    "compute_discount",
    "apply_coupon",
    "check_draft",
    "CouponStore",
    "MemoryCouponStore",
    "SQLAlchemyCouponStore",
    "CouponAdmin",
)
