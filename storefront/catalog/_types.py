"""
Catalog types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Product:
    """
    A purchasable item (rank or coin pack).

    Immutable once created; pricing reads ``price`` and ``name`` only.
    """

    id: str
    name: str
    price: Decimal
    category: str
    featured: bool = False
    description: str | None = None
    image_url: str | None = None


__all__ = ("Product",)
