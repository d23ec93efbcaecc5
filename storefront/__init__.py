"""
storefront — Minecraft server shop: catalog, cart, coupons, orders.

    from storefront import pricing as P    # Quote carts, validate coupons
    from storefront import orders as O     # Checkout and order lifecycle
    from storefront import coupons as CP   # Coupon rules, stores, admin
    from storefront.api import create_app  # FastAPI surface
"""

from storefront import errors
from storefront import catalog
from storefront import cart
from storefront import coupons
from storefront import pricing
from storefront import idempotency
from storefront import orders
from storefront import admin
from storefront import payments
from storefront import reviews
from storefront import whitelist_requests
from storefront._types import (
    Money,
    money,
    ZERO,
    utcnow,
)

__version__ = "0.1.0"

__all__ = (
    "errors",
    "catalog",
    "cart",
    "coupons",
    "pricing",
    "idempotency",
    "orders",
    "admin",
    "payments",
    "reviews",
    "whitelist_requests",
    "Money",
    "money",
    "ZERO",
    "utcnow",
)
