"""
Payments — manual payment confirmation.

    from storefront import payments

    review = payments.PaymentReview(confirmations, orders, lifecycle, capabilities)
    proof = (await review.submit(order.id, player, "uploads/tx-123.png")).unwrap()
    await review.approve(admin, proof.id)        # order → completed
"""

from storefront.payments._types import PaymentConfirmation
from storefront.payments._store import ConfirmationStore, MemoryConfirmationStore
from storefront.payments._sqlalchemy import SQLAlchemyConfirmationStore
from storefront.payments._review import PaymentReview, MAX_REFERENCE_LENGTH

__all__ = (
    "PaymentConfirmation",
    "ConfirmationStore",
    "MemoryConfirmationStore",
    "SQLAlchemyConfirmationStore",
    "PaymentReview",
    "MAX_REFERENCE_LENGTH",
)
