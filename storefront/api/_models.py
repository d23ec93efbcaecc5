"""
HTTP models — pydantic at the boundary, frozen dataclasses inside.

Requests convert with ``to_domain()``, responses with ``from_domain()``.
JSON field names are camelCase.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront._types import money
from storefront.catalog import Product
from storefront.cart import CartEntry
from storefront.coupons import Coupon, CouponDraft, CouponQuote, DiscountType
from storefront.orders import Order, OrderLineItem, OrderStats, PlaceOrder
from storefront.admin import AdminEntry
from storefront.payments import PaymentConfirmation
from storefront.reviews import Review, RatingSummary
from storefront.whitelist_requests import WhitelistApplication, WhitelistRequest


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog / Cart
# ═══════════════════════════════════════════════════════════════════════════════


class ProductOut(CamelModel):
    id: str
    name: str
    price: Decimal
    category: str
    featured: bool
    description: str | None = None
    image_url: str | None = None

    @classmethod
    def from_domain(cls, product: Product) -> "ProductOut":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            category=product.category,
            featured=product.featured,
            description=product.description,
            image_url=product.image_url,
        )


class CartAddIn(CamelModel):
    product_id: str
    quantity: int = 1


class CartQuantityIn(CamelModel):
    quantity: int


class CartLineOut(CamelModel):
    id: str
    product_id: str
    quantity: int
    product: ProductOut

    @classmethod
    def from_domain(cls, entry: CartEntry) -> "CartLineOut":
        return cls(
            id=entry.line.id,
            product_id=entry.line.product_id,
            quantity=entry.line.quantity,
            product=ProductOut.from_domain(entry.product),
        )


class CartLineRef(CamelModel):
    """A bare line after a mutation; the product is not re-read."""

    id: str
    product_id: str
    quantity: int


# ═══════════════════════════════════════════════════════════════════════════════
# Coupons
# ═══════════════════════════════════════════════════════════════════════════════


class ValidateCouponIn(CamelModel):
    code: str
    order_amount: Decimal = Field(ge=0)


class ValidateCouponOut(CamelModel):
    valid: bool
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    discount_amount: Decimal
    final_amount: Decimal

    @classmethod
    def from_domain(cls, quote: CouponQuote) -> "ValidateCouponOut":
        return cls(
            valid=True,
            code=quote.coupon.code,
            discount_type=quote.coupon.discount_type,
            discount_value=quote.coupon.discount_value,
            discount_amount=quote.discount_amount,
            final_amount=quote.final_amount,
        )


class CouponIn(CamelModel):
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: datetime
    valid_until: datetime
    minimum_order_amount: Decimal | None = None
    max_usages: int | None = None
    is_active: bool = True
    description: str | None = None

    def to_domain(self) -> CouponDraft:
        return CouponDraft(
            code=self.code,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            valid_from=_utc(self.valid_from),
            valid_until=_utc(self.valid_until),
            minimum_order_amount=self.minimum_order_amount,
            max_usages=self.max_usages,
            is_active=self.is_active,
            description=self.description,
        )


class CouponOut(CamelModel):
    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    minimum_order_amount: Decimal | None
    max_usages: int | None
    current_usages: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    description: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, coupon: Coupon) -> "CouponOut":
        return cls(
            id=coupon.id,
            code=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            minimum_order_amount=coupon.minimum_order_amount,
            max_usages=coupon.max_usages,
            current_usages=coupon.current_usages,
            valid_from=coupon.valid_from,
            valid_until=coupon.valid_until,
            is_active=coupon.is_active,
            description=coupon.description,
            created_at=coupon.created_at,
            updated_at=coupon.updated_at,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class PlaceOrderIn(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    player_name: str | None = Field(default=None, max_length=100)
    coupon_code: str | None = None
    payment_method: str = "pending"

    def to_domain(
        self,
        session_id: str,
        user_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> PlaceOrder:
        return PlaceOrder(
            session_id=session_id,
            email=self.email,
            payment_method=self.payment_method,
            player_name=self.player_name,
            user_id=user_id,
            coupon_code=self.coupon_code,
            idempotency_key=idempotency_key,
        )


class OrderItemOut(CamelModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    @classmethod
    def from_domain(cls, item: OrderLineItem) -> "OrderItemOut":
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
        )


class OrderOut(CamelModel):
    id: str
    email: str
    player_name: str | None
    status: str
    items: list[OrderItemOut]
    original_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    coupon_code: str | None
    payment_method: str
    transaction_id: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, order: Order) -> "OrderOut":
        return cls(
            id=order.id,
            email=order.email,
            player_name=order.player_name,
            status=order.status.value,
            items=[OrderItemOut.from_domain(i) for i in order.items],
            original_amount=money(order.original_amount),
            discount_amount=money(order.discount_amount),
            total_amount=money(order.total_amount),
            coupon_code=order.coupon_code,
            payment_method=order.payment_method,
            transaction_id=order.transaction_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class CancelOrderIn(CamelModel):
    email: str | None = None


class SetStatusIn(CamelModel):
    status: str


class AdminCancelIn(CamelModel):
    reason: str | None = Field(default=None, max_length=500)


class OrderStatsOut(CamelModel):
    total_orders: int
    completed_orders: int
    total_revenue: Decimal

    @classmethod
    def from_domain(cls, stats: OrderStats) -> "OrderStatsOut":
        return cls(
            total_orders=stats.total_orders,
            completed_orders=stats.completed_orders,
            total_revenue=stats.total_revenue,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Admin
# ═══════════════════════════════════════════════════════════════════════════════


class WhitelistIn(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    role: str = "admin"


class AdminEntryOut(CamelModel):
    email: str
    role: str
    created_at: datetime

    @classmethod
    def from_domain(cls, entry: AdminEntry) -> "AdminEntryOut":
        return cls(email=entry.email, role=entry.role, created_at=entry.created_at)


class DeletedOut(CamelModel):
    deleted: bool


# ═══════════════════════════════════════════════════════════════════════════════
# Payment confirmations
# ═══════════════════════════════════════════════════════════════════════════════


class ConfirmationIn(CamelModel):
    screenshot_ref: str
    email: str | None = None


class ApproveConfirmationIn(CamelModel):
    transaction_id: str | None = None


class RejectIn(CamelModel):
    reason: str


class ConfirmationOut(CamelModel):
    id: str
    order_id: str
    screenshot_ref: str
    status: str
    submitted_at: datetime
    reviewed_at: datetime | None
    reviewed_by: str | None
    rejection_reason: str | None

    @classmethod
    def from_domain(cls, confirmation: PaymentConfirmation) -> "ConfirmationOut":
        return cls(
            id=confirmation.id,
            order_id=confirmation.order_id,
            screenshot_ref=confirmation.screenshot_ref,
            status=confirmation.status.value,
            submitted_at=confirmation.submitted_at,
            reviewed_at=confirmation.reviewed_at,
            reviewed_by=confirmation.reviewed_by,
            rejection_reason=confirmation.rejection_reason,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Reviews
# ═══════════════════════════════════════════════════════════════════════════════


class ReviewIn(CamelModel):
    rating: int
    comment: str


class ReviewOut(CamelModel):
    id: str
    product_id: str
    user_id: str
    rating: int
    comment: str
    created_at: datetime

    @classmethod
    def from_domain(cls, review: Review) -> "ReviewOut":
        return cls(
            id=review.id,
            product_id=review.product_id,
            user_id=review.user_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
        )


class RatingSummaryOut(CamelModel):
    count: int
    average: Decimal | None

    @classmethod
    def from_domain(cls, summary: RatingSummary) -> "RatingSummaryOut":
        return cls(count=summary.count, average=summary.average)


# ═══════════════════════════════════════════════════════════════════════════════
# Whitelist requests
# ═══════════════════════════════════════════════════════════════════════════════


class WhitelistRequestIn(CamelModel):
    minecraft_username: str
    email: str | None = None
    discord_username: str | None = None

    def to_domain(self, user_id: str | None = None) -> WhitelistApplication:
        return WhitelistApplication(
            minecraft_username=self.minecraft_username,
            email=self.email,
            discord_username=self.discord_username,
            user_id=user_id,
        )


class WhitelistDecisionIn(CamelModel):
    note: str | None = None


class WhitelistRequestOut(CamelModel):
    id: str
    minecraft_username: str
    status: str
    submitted_at: datetime
    email: str | None
    discord_username: str | None
    reason: str | None
    processed_at: datetime | None
    processed_by: str | None

    @classmethod
    def from_domain(cls, request: WhitelistRequest) -> "WhitelistRequestOut":
        return cls(
            id=request.id,
            minecraft_username=request.minecraft_username,
            status=request.status.value,
            submitted_at=request.submitted_at,
            email=request.email,
            discord_username=request.discord_username,
            reason=request.reason,
            processed_at=request.processed_at,
            processed_by=request.processed_by,
        )


__all__ = (
    "CamelModel",
    "ProductOut",
    "CartAddIn",
    "CartQuantityIn",
    "CartLineOut",
    "CartLineRef",
    "ValidateCouponIn",
    "ValidateCouponOut",
    "CouponIn",
    "CouponOut",
    "PlaceOrderIn",
    "OrderItemOut",
    "OrderOut",
    "CancelOrderIn",
    "SetStatusIn",
    "AdminCancelIn",
    "OrderStatsOut",
    "WhitelistIn",
    "AdminEntryOut",
    "DeletedOut",
    "ConfirmationIn",
    "ApproveConfirmationIn",
    "RejectIn",
    "ConfirmationOut",
    "ReviewIn",
    "ReviewOut",
    "RatingSummaryOut",
    "WhitelistRequestIn",
    "WhitelistDecisionIn",
    "WhitelistRequestOut",
)
