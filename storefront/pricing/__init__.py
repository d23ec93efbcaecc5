"""
Pricing — cart + optional coupon → priced order quote.

    from storefront import pricing as P

    engine = P.PricingEngine(catalog, coupons)
    match await engine.price_cart(lines, "SAVE20", P.PricingMode.STRICT):
        case Ok(quote): quote.final_amount
        case Error(e): e.code
"""

from storefront.pricing._types import (
    PricingMode,
    PricedLine,
    PricedOrder,
    PricingRequest,
)
from storefront.pricing._graph import (
    RequestNode,
    ResolvedLinesNode,
    OriginalAmountNode,
    CouponLookupNode,
    CouponOutcome,
    QuoteNode,
    price,
)
from storefront.pricing._engine import PricingEngine

STRICT = PricingMode.STRICT
LENIENT = PricingMode.LENIENT

__all__ = (
    "PricingMode",
    "STRICT",
    "LENIENT",
    "PricedLine",
    "PricedOrder",
    "PricingRequest",
    "RequestNode",
    "ResolvedLinesNode",
    "OriginalAmountNode",
    "CouponLookupNode",
    "CouponOutcome",
    "QuoteNode",
    "price",
    "PricingEngine",
)
