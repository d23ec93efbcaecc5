"""
Coupon rules — pure functions, no I/O.

Validation order is fixed and short-circuits on the first failure:

    active → date window → minimum order amount → usage limit
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from kungfu import Result, Ok, Error

from storefront._types import ZERO, money
from storefront.errors import (
    CouponError,
    CouponInactiveError,
    CouponExpiredError,
    CouponMinimumNotMetError,
    CouponUsageExceededError,
    InvalidCouponError,
)
from storefront.coupons._types import Coupon, CouponDraft, CouponQuote, DiscountType


def normalize_code(code: str) -> str:
    return code.strip().upper()


def check_coupon(coupon: Coupon, amount: Decimal, now: datetime) -> Result[Coupon, CouponError]:
    if not coupon.is_active:
        return Error(CouponInactiveError(coupon.code))

    if now < coupon.valid_from:
        return Error(CouponExpiredError(coupon.code, not_yet_valid=True))
    if now > coupon.valid_until:
        return Error(CouponExpiredError(coupon.code))

    minimum = coupon.minimum_order_amount
    if minimum is not None and amount < minimum:
        return Error(CouponMinimumNotMetError(coupon.code, minimum))

    if coupon.is_exhausted:
        return Error(CouponUsageExceededError(coupon.code))

    return Ok(coupon)


def compute_discount(coupon: Coupon, amount: Decimal) -> Decimal:
    """
    Discount for ``amount``, never more than the amount itself.

        percentage: round(amount * value / 100, 2)
        fixed:      min(value, amount)
    """
    match coupon.discount_type:
        case DiscountType.PERCENTAGE:
            discount = money(amount * coupon.discount_value / 100)
        case DiscountType.FIXED:
            discount = money(min(coupon.discount_value, amount))
    return min(discount, money(amount))


def apply_coupon(
    coupon: Coupon, amount: Decimal, now: datetime
) -> Result[CouponQuote, CouponError]:
    """Validate then price: the full strict path for one coupon and amount."""
    match check_coupon(coupon, amount, now):
        case Error(e):
            return Error(e)
        case Ok(_):
            original = money(amount)
            discount = compute_discount(coupon, original)
            return Ok(
                CouponQuote(
                    coupon=coupon,
                    original_amount=original,
                    discount_amount=discount,
                    final_amount=max(ZERO, money(original - discount)),
                )
            )


def check_draft(draft: CouponDraft) -> Result[CouponDraft, InvalidCouponError]:
    """Admin-side invariants for a new coupon. Returns the draft with its code normalized."""
    code = normalize_code(draft.code)
    if not code:
        return Error(InvalidCouponError("Coupon code must not be empty"))
    if draft.discount_value <= 0:
        return Error(InvalidCouponError("Discount value must be positive"))
    if draft.discount_type is DiscountType.PERCENTAGE and draft.discount_value > 100:
        return Error(InvalidCouponError("Percentage discount cannot exceed 100"))
    if draft.valid_from > draft.valid_until:
        return Error(InvalidCouponError("valid_from must not be after valid_until"))
    if draft.max_usages is not None and draft.max_usages < 1:
        return Error(InvalidCouponError("max_usages must be at least 1"))
    if draft.minimum_order_amount is not None and draft.minimum_order_amount < 0:
        return Error(InvalidCouponError("minimum_order_amount must not be negative"))

    return Ok(
        CouponDraft(
            code=code,
            discount_type=draft.discount_type,
            discount_value=money(draft.discount_value),
            valid_from=draft.valid_from,
            valid_until=draft.valid_until,
            minimum_order_amount=(
                money(draft.minimum_order_amount)
                if draft.minimum_order_amount is not None
                else None
            ),
            max_usages=draft.max_usages,
            is_active=draft.is_active,
            description=draft.description,
        )
    )


__all__ = (
    "normalize_code",
    "check_coupon",
    "compute_discount",
    "apply_coupon",
    "check_draft",
)
