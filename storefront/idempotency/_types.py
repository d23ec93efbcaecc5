"""
Idempotency types — records kept per client request key.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from storefront._types import utcnow


class RecordState(Enum):
    """
    Lifecycle:
        PENDING → COMPLETED (operation succeeded, reference stored)
                → (deleted)  (operation failed, key free for retry)
    """

    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class IdempotencyRecord:
    """
    A claimed key.

    reference: id of the resource the request produced (the order id).
    input_hash: fingerprint of the request that claimed the key.
    """

    key: str
    state: RecordState
    reference: str | None
    input_hash: str | None
    created_at: datetime
    expires_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and utcnow() > self.expires_at

    @property
    def is_pending(self) -> bool:
        return self.state is RecordState.PENDING

    @property
    def is_completed(self) -> bool:
        return self.state is RecordState.COMPLETED


def fingerprint(payload: dict[str, object]) -> str:
    """Stable sha256 of a request payload; key order does not matter."""
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode()).hexdigest()


__all__ = ("RecordState", "IdempotencyRecord", "fingerprint")
