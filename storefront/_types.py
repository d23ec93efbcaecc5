"""
Core types for storefront.

Re-exports from kungfu + money helpers shared by every package.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Amounts in store currency, two decimal places."""

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Decimal | int | str) -> Money:
    """
    Quantize to cents, half-up.

        money("9.999")  # Decimal("10.00")
        money(5)        # Decimal("5.00")

    Floats are rejected: binary fractions are not money.
    """
    if isinstance(value, float):
        raise TypeError("money() does not accept float, pass str or Decimal")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# ═══════════════════════════════════════════════════════════════════════════════
# Clock
# ═══════════════════════════════════════════════════════════════════════════════


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Admin decisions
# ═══════════════════════════════════════════════════════════════════════════════


class Decision(Enum):
    """Outcome of an admin review; only PENDING submissions can be decided."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Money
    "Money",
    "CENT",
    "ZERO",
    "money",
    # Clock
    "utcnow",
    # Admin decisions
    "Decision",
)
