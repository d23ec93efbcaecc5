"""
Cart view — lines joined with their products.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error, LazyCoroResult

import combinators as C

from storefront.errors import StorageError
from storefront.catalog import CatalogStore, Product
from storefront.cart._types import CartLine, CartEntry
from storefront.cart._store import CartStore

logger = logging.getLogger(__name__)


async def view_cart(
    cart: CartStore,
    catalog: CatalogStore,
    session_id: str,
) -> Result[list[CartEntry], StorageError]:
    """
    Current cart with product details.

    Lines whose product left the catalog are omitted from the view (they
    stay in the store and are skipped again at checkout).
    """
    match await cart.get_lines(session_id):
        case Error(e):
            return Error(e)
        case Ok(lines):
            pass

    def fetch(line: CartLine) -> LazyCoroResult[Product | None, StorageError]:
        return LazyCoroResult(lambda: catalog.get(line.product_id))

    match await C.traverse_par(lines, fetch)():
        case Error(e):
            return Error(e)
        case Ok(products):
            pass

    entries: list[CartEntry] = []
    for line, product in zip(lines, products):
        if product is None:
            logger.warning("Cart %s: product %s no longer exists", session_id, line.product_id)
            continue
        entries.append(CartEntry(line, product))
    return Ok(entries)


__all__ = ("view_cart",)
