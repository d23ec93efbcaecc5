"""
Pricing types — the quote and its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.errors import CouponError
from storefront.catalog import CatalogStore, Product
from storefront.cart import CartLine
from storefront.coupons import CouponStore


class PricingMode(Enum):
    """
    What an unusable coupon does to the quote.

    STRICT: the whole request fails with the coupon error.
            Used by explicit coupon validation.

    LENIENT: the coupon is dropped, the cart is priced in full.
             Used at order creation, where the client already validated.
    """

    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True, slots=True)
class PricedLine:
    """Snapshot of one resolved cart line at quote time."""

    product: Product
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True, slots=True)
class PricedOrder:
    """
    A priced order quote.

    Invariant: final_amount == max(0, original_amount - discount_amount).
    ``rejection`` holds the coupon error dropped in LENIENT mode.
    """

    lines: tuple[PricedLine, ...]
    original_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    applied_coupon_code: str | None = None
    rejection: CouponError | None = None


@dataclass(frozen=True)
class PricingRequest:
    """Everything one pricing run needs. Injected into the pricing graph."""

    lines: tuple[CartLine, ...]
    coupon_code: str | None
    mode: PricingMode
    now: datetime
    catalog: CatalogStore
    coupons: CouponStore


__all__ = ("PricingMode", "PricedLine", "PricedOrder", "PricingRequest")
