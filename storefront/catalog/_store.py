"""
Catalog store — protocol and in-memory implementation.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from kungfu import Result, Ok

from storefront.errors import StorageError
from storefront.catalog._types import Product


class CatalogStore(Protocol):
    """Read side used by pricing, plus the admin-side ``add``."""

    async def get(self, product_id: str) -> Result[Product | None, StorageError]:
        """Ok(None) when the product does not exist."""
        ...

    async def list_all(self) -> Result[list[Product], StorageError]: ...

    async def list_by_category(self, category: str) -> Result[list[Product], StorageError]: ...

    async def add(self, product: Product) -> Result[Product, StorageError]: ...


class MemoryCatalog:
    """In-memory catalog. Insertion order is listing order."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self._products: dict[str, Product] = {p.id: p for p in products or []}
        self._lock = asyncio.Lock()

    async def get(self, product_id: str) -> Result[Product | None, StorageError]:
        async with self._lock:
            return Ok(self._products.get(product_id))

    async def list_all(self) -> Result[list[Product], StorageError]:
        async with self._lock:
            return Ok(list(self._products.values()))

    async def list_by_category(self, category: str) -> Result[list[Product], StorageError]:
        async with self._lock:
            return Ok([p for p in self._products.values() if p.category == category])

    async def add(self, product: Product) -> Result[Product, StorageError]:
        async with self._lock:
            self._products[product.id] = product
            return Ok(product)

    async def remove(self, product_id: str) -> Result[bool, StorageError]:
        """Delete a product; existing carts keep the now-stale line."""
        async with self._lock:
            return Ok(self._products.pop(product_id, None) is not None)


__all__ = ("CatalogStore", "MemoryCatalog")
