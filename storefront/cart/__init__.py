"""
Cart — per-session line items.

    from storefront import cart

    store = cart.MemoryCartStore()
    await store.add_line("sess-1", "vip-rank", 1)
    await store.add_line("sess-1", "vip-rank", 2)   # merged: quantity 3
"""

from storefront.cart._types import CartLine, CartEntry, is_valid_quantity
from storefront.cart._store import CartStore, MemoryCartStore
from storefront.cart._sqlalchemy import SQLAlchemyCartStore
from storefront.cart._view import view_cart

__all__ = (
    "CartLine",
    "CartEntry",
    "is_valid_quantity",
    "CartStore",
    "MemoryCartStore",
    "SQLAlchemyCartStore",
    "view_cart",
)
