"""
Pricing graph — one quote as a nodnod computation.

Architecture:
    PricingRequest (injected)
         │
         ▼
    RequestNode
         │
         ├──────────────────────────┐
         ▼                          ▼
    ResolvedLinesNode          CouponLookupNode      (run concurrently)
         │                          │
         ▼                          │
    OriginalAmountNode              │
         │                          │
         └────────────┬─────────────┘
                      ▼
              CouponOutcome (@polymorphic)
               ├── no_coupon
               ├── unknown_code
               └── evaluated
                      │
                      ▼
                  QuoteNode

Nodes raise domain errors (EmptyCartError, StorageError, CouponError in
strict mode); ``price`` turns them back into results.

Note: no ``from __future__ import annotations`` here, nodnod resolves
``__compose__`` hints at runtime.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from kungfu import Result, Ok, Error, LazyCoroResult
from nodnod import NodeError, polymorphic, case

import combinators as C

from storefront import graph as G
from storefront._types import ZERO, money
from storefront.errors import (
    StorefrontError,
    StorageError,
    EmptyCartError,
    CouponError,
    CouponNotFoundError,
    PricingError,
)
from storefront.catalog import Product
from storefront.cart import CartLine
from storefront.coupons import Coupon, normalize_code, apply_coupon
from storefront.pricing._types import (
    PricingMode,
    PricedLine,
    PricedOrder,
    PricingRequest,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Entry Node
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class RequestNode:
    def __init__(self, request: PricingRequest) -> None:
        self.request = request

    @classmethod
    def __compose__(cls, request: PricingRequest) -> "RequestNode":
        return cls(request)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart side
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class ResolvedLinesNode:
    """
    Resolve every cart line against the catalog, in parallel.

    Lines whose product is gone are skipped, not fatal. No line left means
    there is nothing to sell.
    """

    def __init__(self, lines: tuple[PricedLine, ...]) -> None:
        self.lines = lines

    @classmethod
    async def __compose__(cls, request: RequestNode) -> "ResolvedLinesNode":
        req = request.request

        def fetch(line: CartLine) -> LazyCoroResult[Product | None, StorageError]:
            return LazyCoroResult(lambda: req.catalog.get(line.product_id))

        match await C.traverse_par(req.lines, fetch)():
            case Error(e):
                raise e
            case Ok(products):
                pass

        priced: list[PricedLine] = []
        for line, product in zip(req.lines, products):
            if product is None:
                logger.warning("Skipping cart line %s: product %s no longer exists",
                               line.id, line.product_id)
                continue
            priced.append(
                PricedLine(
                    product=product,
                    quantity=line.quantity,
                    unit_price=money(product.price),
                    total_price=money(product.price * line.quantity),
                )
            )

        if not priced:
            raise EmptyCartError()
        return cls(tuple(priced))


@G.node
class OriginalAmountNode:
    """Sum of per-line totals; each line is rounded before summing."""

    def __init__(self, amount: Decimal) -> None:
        self.amount = amount

    @classmethod
    def __compose__(cls, resolved: ResolvedLinesNode) -> "OriginalAmountNode":
        return cls(money(sum((l.total_price for l in resolved.lines), ZERO)))


# ═══════════════════════════════════════════════════════════════════════════════
# Coupon side
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class CouponLookupNode:
    """Normalize the code and fetch the coupon. Blank codes count as no code."""

    def __init__(self, code: str | None, coupon: Coupon | None) -> None:
        self.code = code
        self.coupon = coupon

    @classmethod
    async def __compose__(cls, request: RequestNode) -> "CouponLookupNode":
        raw = request.request.coupon_code
        code = normalize_code(raw) if raw is not None else ""
        if not code:
            return cls(None, None)

        match await request.request.coupons.get_by_code(code):
            case Error(e):
                raise e
            case Ok(coupon):
                return cls(code, coupon)


# ═══════════════════════════════════════════════════════════════════════════════
# Coupon Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class NoDiscount:
    pass


@dataclass(frozen=True)
class Discounted:
    code: str
    discount: Decimal


@dataclass(frozen=True)
class Rejected:
    error: CouponError


type Outcome = NoDiscount | Discounted | Rejected


@polymorphic[Outcome]
class CouponOutcome:
    """Route on what the lookup found. Each case refuses with NodeError when it does not apply."""

    @case
    def no_coupon(cls, lookup: CouponLookupNode) -> Outcome:
        if lookup.code is not None:
            raise NodeError("Code given")
        return NoDiscount()

    @case
    def unknown_code(cls, lookup: CouponLookupNode) -> Outcome:
        if lookup.code is None or lookup.coupon is not None:
            raise NodeError("Nothing to reject")
        return Rejected(CouponNotFoundError(lookup.code))

    @case
    def evaluated(
        cls,
        lookup: CouponLookupNode,
        original: OriginalAmountNode,
        request: RequestNode,
    ) -> Outcome:
        if lookup.coupon is None:
            raise NodeError("No coupon")

        match apply_coupon(lookup.coupon, original.amount, request.request.now):
            case Ok(quote):
                return Discounted(quote.coupon.code, quote.discount_amount)
            case Error(e):
                return Rejected(e)


# ═══════════════════════════════════════════════════════════════════════════════
# Final Node
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class QuoteNode:
    def __init__(self, quote: PricedOrder) -> None:
        self.quote = quote

    @classmethod
    def __compose__(
        cls,
        request: RequestNode,
        resolved: ResolvedLinesNode,
        original: OriginalAmountNode,
        outcome: CouponOutcome,
    ) -> "QuoteNode":
        amount = original.amount

        match outcome.value:
            case Discounted(code=code, discount=discount):
                return cls(
                    PricedOrder(
                        lines=resolved.lines,
                        original_amount=amount,
                        discount_amount=discount,
                        final_amount=max(ZERO, money(amount - discount)),
                        applied_coupon_code=code,
                    )
                )
            case Rejected(error=error) if request.request.mode is PricingMode.STRICT:
                raise error
            case Rejected(error=error):
                logger.info("Coupon dropped from quote: %s", error.message)
                return cls(_full_price(resolved, amount, rejection=error))
            case _:
                return cls(_full_price(resolved, amount))


def _full_price(
    resolved: ResolvedLinesNode,
    amount: Decimal,
    rejection: CouponError | None = None,
) -> PricedOrder:
    return PricedOrder(
        lines=resolved.lines,
        original_amount=amount,
        discount_amount=ZERO,
        final_amount=amount,
        rejection=rejection,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════


async def price(request: PricingRequest) -> Result[PricedOrder, PricingError]:
    """Run the pricing graph. Domain failures come back as Error, never raised."""
    try:
        node = await G.run(QuoteNode).inject(request)
        return Ok(node.quote)
    except StorefrontError as e:
        return Error(e)


__all__ = (
    "RequestNode",
    "ResolvedLinesNode",
    "OriginalAmountNode",
    "CouponLookupNode",
    "NoDiscount",
    "Discounted",
    "Rejected",
    "Outcome",
    "CouponOutcome",
    "QuoteNode",
    "price",
)
