"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.catalog import Product


@dataclass(frozen=True, slots=True)
class CartLine:
    """One product in a session's cart. ``quantity`` is always >= 1."""

    id: str
    session_id: str
    product_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class CartEntry:
    """A cart line joined with its current catalog product."""

    line: CartLine
    product: Product


def is_valid_quantity(quantity: object) -> bool:
    # bool is an int subclass, but True is not a quantity
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1


__all__ = ("CartLine", "CartEntry", "is_valid_quantity")
