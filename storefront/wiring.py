"""
Wiring — one container holding every store and service.

    app_state = build_memory(settings)                      # tests, demos
    app_state = build_sqlalchemy(session_factory, settings) # production

Both builders return the same ``Storefront`` shape; only the stores differ.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.config import Settings
from storefront.catalog import CatalogStore, MemoryCatalog, SQLAlchemyCatalog
from storefront.cart import CartStore, MemoryCartStore, SQLAlchemyCartStore
from storefront.coupons import (
    CouponStore,
    MemoryCouponStore,
    SQLAlchemyCouponStore,
    CouponAdmin,
)
from storefront.admin import (
    AdminStore,
    MemoryAdminStore,
    SQLAlchemyAdminStore,
    Capabilities,
    WhitelistAdmin,
)
from storefront.pricing import PricingEngine
from storefront.idempotency import (
    IdempotencyStore,
    MemoryIdempotencyStore,
    SQLAlchemyIdempotencyStore,
)
from storefront.orders import (
    OrderStore,
    MemoryOrderStore,
    SQLAlchemyOrderStore,
    CheckoutService,
    OrderLifecycle,
    OrderAdmin,
)
from storefront.payments import (
    ConfirmationStore,
    MemoryConfirmationStore,
    SQLAlchemyConfirmationStore,
    PaymentReview,
)
from storefront.reviews import (
    ReviewStore,
    MemoryReviewStore,
    SQLAlchemyReviewStore,
    ProductReviews,
)
from storefront.whitelist_requests import (
    WhitelistRequestStore,
    MemoryWhitelistRequestStore,
    SQLAlchemyWhitelistRequestStore,
    WhitelistRequests,
)
from storefront.notify import LoggingNotifier, NotificationDispatcher, Notifier


@dataclass(frozen=True)
class Storefront:
    settings: Settings
    catalog: CatalogStore
    cart: CartStore
    coupons: CouponStore
    orders: OrderStore
    admins: AdminStore
    idempotency: IdempotencyStore
    confirmations: ConfirmationStore
    reviews_store: ReviewStore
    whitelist_requests_store: WhitelistRequestStore
    capabilities: Capabilities
    engine: PricingEngine
    dispatcher: NotificationDispatcher
    checkout: CheckoutService
    lifecycle: OrderLifecycle
    order_admin: OrderAdmin
    coupon_admin: CouponAdmin
    whitelist: WhitelistAdmin
    payment_review: PaymentReview
    reviews: ProductReviews
    whitelist_requests: WhitelistRequests


def assemble(
    settings: Settings,
    *,
    catalog: CatalogStore,
    cart: CartStore,
    coupons: CouponStore,
    orders: OrderStore,
    admins: AdminStore,
    idempotency: IdempotencyStore,
    confirmations: ConfirmationStore | None = None,
    reviews: ReviewStore | None = None,
    whitelist_requests: WhitelistRequestStore | None = None,
    notifier: Notifier | None = None,
) -> Storefront:
    """
    Build the services on top of whatever stores are given.

    Community stores left out default to in-memory ones.
    """
    if confirmations is None:
        confirmations = MemoryConfirmationStore()
    if reviews is None:
        reviews = MemoryReviewStore()
    if whitelist_requests is None:
        whitelist_requests = MemoryWhitelistRequestStore()
    capabilities = Capabilities(admins, bootstrap=settings.admin_emails)
    engine = PricingEngine(catalog, coupons)
    dispatcher = NotificationDispatcher(notifier or LoggingNotifier())
    lifecycle = OrderLifecycle(orders, capabilities, dispatcher)

    return Storefront(
        settings=settings,
        catalog=catalog,
        cart=cart,
        coupons=coupons,
        orders=orders,
        admins=admins,
        idempotency=idempotency,
        confirmations=confirmations,
        reviews_store=reviews,
        whitelist_requests_store=whitelist_requests,
        capabilities=capabilities,
        engine=engine,
        dispatcher=dispatcher,
        checkout=CheckoutService(
            cart,
            engine,
            orders,
            dispatcher,
            idempotency,
            settings.idempotency_ttl,
        ),
        lifecycle=lifecycle,
        order_admin=OrderAdmin(orders, capabilities),
        coupon_admin=CouponAdmin(coupons, capabilities),
        whitelist=WhitelistAdmin(admins, capabilities),
        payment_review=PaymentReview(confirmations, orders, lifecycle, capabilities),
        reviews=ProductReviews(reviews, catalog, capabilities),
        whitelist_requests=WhitelistRequests(whitelist_requests, capabilities),
    )


def build_memory(
    settings: Settings | None = None,
    notifier: Notifier | None = None,
) -> Storefront:
    return assemble(
        settings or Settings(),
        catalog=MemoryCatalog(),
        cart=MemoryCartStore(),
        coupons=MemoryCouponStore(),
        orders=MemoryOrderStore(),
        admins=MemoryAdminStore(),
        idempotency=MemoryIdempotencyStore(),
        confirmations=MemoryConfirmationStore(),
        reviews=MemoryReviewStore(),
        whitelist_requests=MemoryWhitelistRequestStore(),
        notifier=notifier,
    )


def build_sqlalchemy(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings | None = None,
    notifier: Notifier | None = None,
) -> Storefront:
    return assemble(
        settings or Settings(),
        catalog=SQLAlchemyCatalog(session_factory),
        cart=SQLAlchemyCartStore(session_factory),
        coupons=SQLAlchemyCouponStore(session_factory),
        orders=SQLAlchemyOrderStore(session_factory),
        admins=SQLAlchemyAdminStore(session_factory),
        idempotency=SQLAlchemyIdempotencyStore(session_factory),
        confirmations=SQLAlchemyConfirmationStore(session_factory),
        reviews=SQLAlchemyReviewStore(session_factory),
        whitelist_requests=SQLAlchemyWhitelistRequestStore(session_factory),
        notifier=notifier,
    )


__all__ = ("Storefront", "assemble", "build_memory", "build_sqlalchemy")
