"""
Reviews — star ratings and comments on catalog products.

    from storefront import reviews

    service = reviews.ProductReviews(reviews.MemoryReviewStore(), catalog, capabilities)
    await service.post(Requester(user_id="u-1"), "vip-rank", 5, "Worth it")
"""

from storefront.reviews._types import (
    MIN_RATING,
    MAX_RATING,
    MAX_COMMENT_LENGTH,
    ReviewDraft,
    Review,
    RatingSummary,
    validate_review,
    rating_summary,
)
from storefront.reviews._store import ReviewStore, MemoryReviewStore
from storefront.reviews._sqlalchemy import SQLAlchemyReviewStore
from storefront.reviews._service import ProductReviews

__all__ = (
    "MIN_RATING",
    "MAX_RATING",
    "MAX_COMMENT_LENGTH",
    "ReviewDraft",
    "Review",
    "RatingSummary",
    "validate_review",
    "rating_summary",
    "ReviewStore",
    "MemoryReviewStore",
    "SQLAlchemyReviewStore",
    "ProductReviews",
)
