"""
Order types.

An order is a snapshot: items and amounts are captured at creation and never
recomputed. Only status and payment metadata change afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront._types import ZERO


class OrderStatus(Enum):
    """
    Lifecycle:
        PENDING → PAYMENT_PENDING → COMPLETED
        PENDING → CANCELLED
        PAYMENT_PENDING → CANCELLED (admin)
        any non-terminal → FAILED
    """

    PENDING = "pending"
    PAYMENT_PENDING = "payment_pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL


TERMINAL = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.FAILED})

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PAYMENT_PENDING, OrderStatus.CANCELLED, OrderStatus.FAILED}
    ),
    OrderStatus.PAYMENT_PENDING: frozenset(
        {OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.FAILED}
    ),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


type StatusGuard = OrderStatus | frozenset[OrderStatus]
"""Statuses an order must be in for a conditional write to apply."""


def as_statuses(guard: StatusGuard) -> frozenset[OrderStatus]:
    return frozenset({guard}) if isinstance(guard, OrderStatus) else guard


def sources_of(target: OrderStatus) -> frozenset[OrderStatus]:
    """Every status ``TRANSITIONS`` allows to move to ``target``."""
    return frozenset(s for s, targets in TRANSITIONS.items() if target in targets)


@dataclass(frozen=True, slots=True)
class OrderLineItem:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True, slots=True)
class OrderDraft:
    """An order before the store gives it an id, a status and timestamps."""

    email: str
    items: tuple[OrderLineItem, ...]
    original_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    session_id: str | None = None
    user_id: str | None = None
    player_name: str | None = None
    coupon_code: str | None = None
    payment_method: str = "pending"


@dataclass(frozen=True, slots=True)
class Order:
    id: str
    email: str
    items: tuple[OrderLineItem, ...]
    original_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    session_id: str | None = None
    user_id: str | None = None
    player_name: str | None = None
    coupon_code: str | None = None
    payment_method: str = "pending"
    transaction_id: str | None = None

    def is_owned_by(
        self,
        email: str | None = None,
        session_id: str | None = None,
        user_id: str | None = None,
    ) -> bool:
        """Email (case-insensitive), session id or user id must match."""
        if email and email.strip().lower() == self.email.lower():
            return True
        if session_id and session_id == self.session_id:
            return True
        return bool(user_id) and user_id == self.user_id


@dataclass(frozen=True, slots=True)
class PlaceOrder:
    """Checkout request. ``idempotency_key`` makes retries safe."""

    session_id: str
    email: str
    payment_method: str = "pending"
    player_name: str | None = None
    user_id: str | None = None
    coupon_code: str | None = None
    idempotency_key: str | None = None

    def fingerprint_payload(self) -> dict[str, object]:
        return {
            "session_id": self.session_id,
            "email": self.email.strip().lower(),
            "payment_method": self.payment_method,
            "player_name": self.player_name,
            "user_id": self.user_id,
            "coupon_code": (self.coupon_code or "").strip().upper() or None,
        }


@dataclass(frozen=True, slots=True)
class OrderStats:
    total_orders: int
    completed_orders: int
    total_revenue: Decimal = ZERO


__all__ = (
    "OrderStatus",
    "TERMINAL",
    "TRANSITIONS",
    "can_transition",
    "StatusGuard",
    "as_statuses",
    "sources_of",
    "OrderLineItem",
    "OrderDraft",
    "Order",
    "PlaceOrder",
    "OrderStats",
)
