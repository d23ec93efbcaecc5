"""
Payment confirmation types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from storefront._types import Decision


@dataclass(frozen=True, slots=True)
class PaymentConfirmation:
    """
    A player's proof that an order was paid, waiting for an admin.

    ``screenshot_ref`` points at wherever the proof is kept (object key,
    URL); the shop never reads it.
    """

    id: str
    order_id: str
    screenshot_ref: str
    status: Decision
    submitted_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    rejection_reason: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is Decision.PENDING


__all__ = ("PaymentConfirmation",)
