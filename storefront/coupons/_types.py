"""
Coupon types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True, slots=True)
class Coupon:
    """
    A discount code.

    Invariants:
        code is trimmed and uppercase
        discount_value > 0
        valid_from <= valid_until
        current_usages <= max_usages (when max_usages is set)
    """

    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: datetime
    valid_until: datetime
    created_at: datetime
    updated_at: datetime
    minimum_order_amount: Decimal | None = None
    max_usages: int | None = None
    current_usages: int = 0
    is_active: bool = True
    description: str | None = None

    @property
    def is_exhausted(self) -> bool:
        return self.max_usages is not None and self.current_usages >= self.max_usages


@dataclass(frozen=True, slots=True)
class CouponDraft:
    """Admin input for a new coupon. The store assigns id and timestamps."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: datetime
    valid_until: datetime
    minimum_order_amount: Decimal | None = None
    max_usages: int | None = None
    is_active: bool = True
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CouponQuote:
    """Result of validating a coupon against an order amount."""

    coupon: Coupon
    original_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal


__all__ = ("DiscountType", "Coupon", "CouponDraft", "CouponQuote")
