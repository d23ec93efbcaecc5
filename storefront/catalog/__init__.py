"""
Catalog — products that can be put in a cart.

    from storefront import catalog

    store = catalog.MemoryCatalog(list(catalog.SEED_PRODUCTS))
    match await store.get("vip-rank"):
        case Ok(product): ...
"""

from storefront.catalog._types import Product
from storefront.catalog._store import CatalogStore, MemoryCatalog
from storefront.catalog._sqlalchemy import SQLAlchemyCatalog
from storefront.catalog._seed import SEED_PRODUCTS, seed_catalog

__all__ = (
    "Product",
    "CatalogStore",
    "MemoryCatalog",
    "SQLAlchemyCatalog",
    "SEED_PRODUCTS",
    "seed_catalog",
)
