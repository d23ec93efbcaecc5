"""
HTTP routes.

Identity comes from explicit headers (``X-Session-Id``, ``X-User-Id``,
``X-Actor-Email``); the services decide what that identity may do.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from kungfu import Ok, Error

from storefront._types import Decision, money
from storefront.errors import CouponNotFoundError, InvalidWhitelistRequestError, NotFoundError
from storefront.admin import Requester
from storefront.cart import view_cart
from storefront.orders import find_order, orders_for
from storefront.wiring import Storefront
from storefront.api._errors import error_response, unwrap_or_raise
from storefront.api._models import (
    ProductOut,
    CartAddIn,
    CartQuantityIn,
    CartLineOut,
    CartLineRef,
    ValidateCouponIn,
    ValidateCouponOut,
    CouponIn,
    CouponOut,
    PlaceOrderIn,
    OrderOut,
    CancelOrderIn,
    SetStatusIn,
    AdminCancelIn,
    OrderStatsOut,
    WhitelistIn,
    AdminEntryOut,
    DeletedOut,
    ConfirmationIn,
    ApproveConfirmationIn,
    RejectIn,
    ConfirmationOut,
    ReviewIn,
    ReviewOut,
    RatingSummaryOut,
    WhitelistRequestIn,
    WhitelistDecisionIn,
    WhitelistRequestOut,
)

router = APIRouter()


# ═══════════════════════════════════════════════════════════════════════════════
# Dependencies
# ═══════════════════════════════════════════════════════════════════════════════


def get_storefront(request: Request) -> Storefront:
    return request.app.state.storefront


def get_requester(
    x_actor_email: Annotated[str | None, Header()] = None,
    x_session_id: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> Requester:
    return Requester(email=x_actor_email, session_id=x_session_id, user_id=x_user_id)


App = Annotated[Storefront, Depends(get_storefront)]
Actor = Annotated[Requester, Depends(get_requester)]
SessionId = Annotated[str, Header(alias="X-Session-Id")]


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@router.get("/products", response_model=list[ProductOut])
async def list_products(app: App, category: str | None = None) -> list[ProductOut]:
    if category:
        result = await app.catalog.list_by_category(category)
    else:
        result = await app.catalog.list_all()
    return [ProductOut.from_domain(p) for p in unwrap_or_raise(result)]


@router.get("/products/{product_id}", response_model=ProductOut)
async def get_product(app: App, product_id: str) -> ProductOut:
    product = unwrap_or_raise(await app.catalog.get(product_id))
    if product is None:
        raise NotFoundError("Product", product_id)
    return ProductOut.from_domain(product)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@router.get("/cart", response_model=list[CartLineOut])
async def get_cart(app: App, session_id: SessionId) -> list[CartLineOut]:
    entries = unwrap_or_raise(await view_cart(app.cart, app.catalog, session_id))
    return [CartLineOut.from_domain(e) for e in entries]


@router.post("/cart", response_model=CartLineRef)
async def add_to_cart(app: App, session_id: SessionId, body: CartAddIn) -> CartLineRef:
    product = unwrap_or_raise(await app.catalog.get(body.product_id))
    if product is None:
        raise NotFoundError("Product", body.product_id)

    line = unwrap_or_raise(await app.cart.add_line(session_id, body.product_id, body.quantity))
    return CartLineRef(id=line.id, product_id=line.product_id, quantity=line.quantity)


async def _own_line(app: Storefront, session_id: str, line_id: str) -> None:
    lines = unwrap_or_raise(await app.cart.get_lines(session_id))
    if not any(line.id == line_id for line in lines):
        raise NotFoundError("Cart line", line_id)


@router.put("/cart/{line_id}", response_model=CartLineRef)
async def set_cart_quantity(
    app: App, session_id: SessionId, line_id: str, body: CartQuantityIn
) -> CartLineRef:
    await _own_line(app, session_id, line_id)
    line = unwrap_or_raise(await app.cart.set_quantity(line_id, body.quantity))
    if line is None:
        raise NotFoundError("Cart line", line_id)
    return CartLineRef(id=line.id, product_id=line.product_id, quantity=line.quantity)


@router.delete("/cart/{line_id}", response_model=DeletedOut)
async def remove_cart_line(app: App, session_id: SessionId, line_id: str) -> DeletedOut:
    await _own_line(app, session_id, line_id)
    return DeletedOut(deleted=unwrap_or_raise(await app.cart.remove(line_id)))


@router.delete("/cart", response_model=DeletedOut)
async def clear_cart(app: App, session_id: SessionId) -> DeletedOut:
    unwrap_or_raise(await app.cart.clear(session_id))
    return DeletedOut(deleted=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Coupons
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/coupons/validate", response_model=ValidateCouponOut)
async def validate_coupon(app: App, body: ValidateCouponIn) -> ValidateCouponOut | JSONResponse:
    match await app.engine.validate_coupon(body.code, money(body.order_amount)):
        case Ok(quote):
            return ValidateCouponOut.from_domain(quote)
        case Error(CouponNotFoundError() as e):
            return error_response(e, 404)
        case Error(e):
            raise e


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/orders", response_model=OrderOut, status_code=201)
async def place_order(
    app: App,
    session_id: SessionId,
    body: PlaceOrderIn,
    x_user_id: Annotated[str | None, Header()] = None,
    idempotency_key: Annotated[str | None, Header(alias="Idempotency-Key")] = None,
) -> OrderOut:
    request = body.to_domain(session_id, x_user_id, idempotency_key)
    order = unwrap_or_raise(await app.checkout.place_order(request))
    return OrderOut.from_domain(order)


@router.get("/orders", response_model=list[OrderOut])
async def list_orders(app: App, actor: Actor) -> list[OrderOut]:
    """Orders of the calling session or user; guests look one up by id and email."""
    return [OrderOut.from_domain(o) for o in unwrap_or_raise(await orders_for(app.orders, actor))]


@router.get("/orders/{order_id}", response_model=OrderOut)
async def get_order(app: App, order_id: str, email: str) -> OrderOut:
    order = unwrap_or_raise(await find_order(app.orders, order_id, email))
    return OrderOut.from_domain(order)


def _with_email(actor: Requester, email: str | None) -> Requester:
    """Guests prove ownership with the order email from the request body."""
    if not email:
        return actor
    return Requester(email=email, session_id=actor.session_id, user_id=actor.user_id)


@router.put("/orders/{order_id}/cancel", response_model=OrderOut)
async def cancel_order(
    app: App, actor: Actor, order_id: str, body: CancelOrderIn | None = None
) -> OrderOut:
    email = body.email if body is not None else None
    order = unwrap_or_raise(await app.lifecycle.cancel(order_id, _with_email(actor, email)))
    return OrderOut.from_domain(order)


@router.post(
    "/orders/{order_id}/payment-confirmations",
    response_model=ConfirmationOut,
    status_code=201,
)
async def submit_payment_confirmation(
    app: App, actor: Actor, order_id: str, body: ConfirmationIn
) -> ConfirmationOut:
    confirmation = unwrap_or_raise(
        await app.payment_review.submit(
            order_id, _with_email(actor, body.email), body.screenshot_ref
        )
    )
    return ConfirmationOut.from_domain(confirmation)


@router.get("/orders/{order_id}/payment-confirmations", response_model=list[ConfirmationOut])
async def order_payment_confirmations(
    app: App, actor: Actor, order_id: str, email: str | None = None
) -> list[ConfirmationOut]:
    items = unwrap_or_raise(await app.payment_review.for_order(order_id, _with_email(actor, email)))
    return [ConfirmationOut.from_domain(c) for c in items]


# ═══════════════════════════════════════════════════════════════════════════════
# Reviews
# ═══════════════════════════════════════════════════════════════════════════════


@router.get("/products/{product_id}/reviews", response_model=list[ReviewOut])
async def product_reviews(app: App, product_id: str) -> list[ReviewOut]:
    reviews = unwrap_or_raise(await app.reviews.for_product(product_id))
    return [ReviewOut.from_domain(r) for r in reviews]


@router.get("/products/{product_id}/rating", response_model=RatingSummaryOut)
async def product_rating(app: App, product_id: str) -> RatingSummaryOut:
    return RatingSummaryOut.from_domain(unwrap_or_raise(await app.reviews.summary(product_id)))


@router.post("/products/{product_id}/reviews", response_model=ReviewOut, status_code=201)
async def post_review(app: App, actor: Actor, product_id: str, body: ReviewIn) -> ReviewOut:
    review = unwrap_or_raise(
        await app.reviews.post(actor, product_id, body.rating, body.comment)
    )
    return ReviewOut.from_domain(review)


@router.get("/user/reviews", response_model=list[ReviewOut])
async def my_reviews(app: App, actor: Actor) -> list[ReviewOut]:
    return [ReviewOut.from_domain(r) for r in unwrap_or_raise(await app.reviews.for_user(actor))]


@router.delete("/reviews/{review_id}", response_model=DeletedOut)
async def delete_review(app: App, actor: Actor, review_id: str) -> DeletedOut:
    return DeletedOut(deleted=unwrap_or_raise(await app.reviews.delete(actor, review_id)))


# ═══════════════════════════════════════════════════════════════════════════════
# Whitelist requests
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/whitelist-requests", response_model=WhitelistRequestOut, status_code=201)
async def request_whitelist(
    app: App, actor: Actor, body: WhitelistRequestIn
) -> WhitelistRequestOut:
    request = unwrap_or_raise(
        await app.whitelist_requests.submit(body.to_domain(actor.user_id))
    )
    return WhitelistRequestOut.from_domain(request)

# ═══════════════════════════════════════════════════════════════════════════════
# Admin
# ═══════════════════════════════════════════════════════════════════════════════


@router.put("/admin/orders/{order_id}/status", response_model=OrderOut)
async def set_order_status(
    app: App, actor: Actor, order_id: str, body: SetStatusIn
) -> OrderOut:
    order = unwrap_or_raise(await app.lifecycle.set_status(order_id, body.status, actor))
    return OrderOut.from_domain(order)


@router.put("/admin/orders/{order_id}/cancel", response_model=OrderOut)
async def admin_cancel_order(
    app: App, actor: Actor, order_id: str, body: AdminCancelIn | None = None
) -> OrderOut:
    reason = body.reason if body is not None else None
    order = unwrap_or_raise(await app.lifecycle.admin_cancel(order_id, actor, reason))
    return OrderOut.from_domain(order)


@router.get("/admin/payment-confirmations", response_model=list[ConfirmationOut])
async def admin_payment_confirmations(
    app: App, actor: Actor, pending: bool = False
) -> list[ConfirmationOut]:
    items = unwrap_or_raise(await app.payment_review.list(actor, pending_only=pending))
    return [ConfirmationOut.from_domain(c) for c in items]


@router.post(
    "/admin/payment-confirmations/{confirmation_id}/approve", response_model=ConfirmationOut
)
async def approve_payment(
    app: App, actor: Actor, confirmation_id: str, body: ApproveConfirmationIn | None = None
) -> ConfirmationOut:
    transaction_id = body.transaction_id if body is not None else None
    confirmation = unwrap_or_raise(
        await app.payment_review.approve(actor, confirmation_id, transaction_id)
    )
    return ConfirmationOut.from_domain(confirmation)


@router.post(
    "/admin/payment-confirmations/{confirmation_id}/reject", response_model=ConfirmationOut
)
async def reject_payment(
    app: App, actor: Actor, confirmation_id: str, body: RejectIn
) -> ConfirmationOut:
    confirmation = unwrap_or_raise(
        await app.payment_review.reject(actor, confirmation_id, body.reason)
    )
    return ConfirmationOut.from_domain(confirmation)


@router.get("/admin/whitelist-requests", response_model=list[WhitelistRequestOut])
async def admin_whitelist_requests(
    app: App, actor: Actor, status: str | None = None
) -> list[WhitelistRequestOut]:
    try:
        wanted = Decision(status) if status else None
    except ValueError:
        raise InvalidWhitelistRequestError(f"Unknown request status: {status!r}") from None
    items = unwrap_or_raise(await app.whitelist_requests.list(actor, wanted))
    return [WhitelistRequestOut.from_domain(r) for r in items]


@router.post(
    "/admin/whitelist-requests/{request_id}/approve", response_model=WhitelistRequestOut
)
async def approve_whitelist_request(
    app: App, actor: Actor, request_id: str, body: WhitelistDecisionIn | None = None
) -> WhitelistRequestOut:
    note = body.note if body is not None else None
    request = unwrap_or_raise(await app.whitelist_requests.approve(actor, request_id, note))
    return WhitelistRequestOut.from_domain(request)


@router.post(
    "/admin/whitelist-requests/{request_id}/reject", response_model=WhitelistRequestOut
)
async def reject_whitelist_request(
    app: App, actor: Actor, request_id: str, body: RejectIn
) -> WhitelistRequestOut:
    request = unwrap_or_raise(
        await app.whitelist_requests.reject(actor, request_id, body.reason)
    )
    return WhitelistRequestOut.from_domain(request)


@router.get("/admin/orders", response_model=list[OrderOut])
async def admin_orders(app: App, actor: Actor) -> list[OrderOut]:
    return [OrderOut.from_domain(o) for o in unwrap_or_raise(await app.order_admin.list(actor))]


@router.get("/admin/stats", response_model=OrderStatsOut)
async def admin_stats(app: App, actor: Actor) -> OrderStatsOut:
    return OrderStatsOut.from_domain(unwrap_or_raise(await app.order_admin.stats(actor)))


@router.get("/admin/whitelist", response_model=list[AdminEntryOut])
async def list_whitelist(app: App, actor: Actor) -> list[AdminEntryOut]:
    return [AdminEntryOut.from_domain(e) for e in unwrap_or_raise(await app.whitelist.list(actor))]


@router.post("/admin/whitelist", response_model=AdminEntryOut, status_code=201)
async def add_to_whitelist(app: App, actor: Actor, body: WhitelistIn) -> AdminEntryOut:
    entry = unwrap_or_raise(await app.whitelist.add(actor, body.email, body.role))
    return AdminEntryOut.from_domain(entry)


@router.delete("/admin/whitelist/{email}", response_model=DeletedOut)
async def remove_from_whitelist(app: App, actor: Actor, email: str) -> DeletedOut:
    return DeletedOut(deleted=unwrap_or_raise(await app.whitelist.remove(actor, email)))


@router.get("/admin/coupons", response_model=list[CouponOut])
async def list_coupons(app: App, actor: Actor) -> list[CouponOut]:
    return [CouponOut.from_domain(c) for c in unwrap_or_raise(await app.coupon_admin.list(actor))]


@router.post("/admin/coupons", response_model=CouponOut, status_code=201)
async def create_coupon(app: App, actor: Actor, body: CouponIn) -> CouponOut:
    coupon = unwrap_or_raise(await app.coupon_admin.create(actor, body.to_domain()))
    return CouponOut.from_domain(coupon)


@router.patch("/admin/coupons/{coupon_id}/toggle", response_model=CouponOut)
async def toggle_coupon(app: App, actor: Actor, coupon_id: str) -> CouponOut:
    return CouponOut.from_domain(unwrap_or_raise(await app.coupon_admin.toggle(actor, coupon_id)))


@router.delete("/admin/coupons/{coupon_id}", response_model=DeletedOut)
async def delete_coupon(app: App, actor: Actor, coupon_id: str) -> DeletedOut:
    unwrap_or_raise(await app.coupon_admin.delete(actor, coupon_id))
    return DeletedOut(deleted=True)


__all__ = ("router", "get_storefront", "get_requester")
