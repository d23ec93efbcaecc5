"""
Seed data — the launch catalog of ranks and coin packs.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from kungfu import Result, Ok, Error

from storefront.errors import StorageError
from storefront.catalog._types import Product
from storefront.catalog._store import CatalogStore

logger = logging.getLogger(__name__)


SEED_PRODUCTS: tuple[Product, ...] = (
    Product(
        id="vip-rank",
        name="VIP Rank",
        price=Decimal("9.99"),
        category="ranks",
        featured=True,
        description="Access to exclusive areas, special commands, and VIP perks.",
    ),
    Product(
        id="mvp-rank",
        name="MVP Rank",
        price=Decimal("24.99"),
        category="ranks",
        featured=True,
        description="All permissions, custom tags, and exclusive cosmetics.",
    ),
    Product(
        id="elite-rank",
        name="ELITE Rank",
        price=Decimal("16.99"),
        category="ranks",
        description="Special abilities, priority support, and exclusive server access.",
    ),
    Product(
        id="legend-rank",
        name="LEGEND Rank",
        price=Decimal("99.99"),
        category="ranks",
        description="Unique abilities, custom particles, and lifetime benefits.",
    ),
    Product(
        id="coins-1000",
        name="1,000 Coins",
        price=Decimal("4.99"),
        category="coins",
        description="Starter pack for items, upgrades, and cosmetics in-game.",
    ),
)


async def seed_catalog(store: CatalogStore) -> Result[int, StorageError]:
    """Insert the launch products into an empty catalog. Returns how many were added."""
    match await store.list_all():
        case Error(e):
            return Error(e)
        case Ok(existing) if existing:
            logger.info("Catalog already seeded (%d products)", len(existing))
            return Ok(0)
        case Ok(_):
            pass

    for product in SEED_PRODUCTS:
        match await store.add(product):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

    logger.info("Seeded catalog with %d products", len(SEED_PRODUCTS))
    return Ok(len(SEED_PRODUCTS))


__all__ = ("SEED_PRODUCTS", "seed_catalog")
