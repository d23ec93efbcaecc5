"""
Product review types and the rules a review must satisfy.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from kungfu import Result, Ok, Error

from storefront.errors import InvalidReviewError

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 500


@dataclass(frozen=True, slots=True)
class ReviewDraft:
    product_id: str
    user_id: str
    rating: int
    comment: str


@dataclass(frozen=True, slots=True)
class Review:
    id: str
    product_id: str
    user_id: str
    rating: int
    comment: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class RatingSummary:
    count: int
    average: Decimal | None = None


def validate_review(draft: ReviewDraft) -> Result[ReviewDraft, InvalidReviewError]:
    """Rating 1..5 stars, comment 1..500 characters after trimming."""
    if isinstance(draft.rating, bool) or not isinstance(draft.rating, int):
        return Error(InvalidReviewError(f"Rating must be a whole number, got {draft.rating!r}"))
    if not MIN_RATING <= draft.rating <= MAX_RATING:
        return Error(
            InvalidReviewError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        )

    comment = draft.comment.strip()
    if not comment:
        return Error(InvalidReviewError("A review needs a comment"))
    if len(comment) > MAX_COMMENT_LENGTH:
        return Error(
            InvalidReviewError(f"Comment is longer than {MAX_COMMENT_LENGTH} characters")
        )

    return Ok(
        ReviewDraft(
            product_id=draft.product_id,
            user_id=draft.user_id,
            rating=draft.rating,
            comment=comment,
        )
    )


def rating_summary(reviews: list[Review]) -> RatingSummary:
    if not reviews:
        return RatingSummary(count=0)
    total = sum(r.rating for r in reviews)
    average = (Decimal(total) / len(reviews)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return RatingSummary(count=len(reviews), average=average)


__all__ = (
    "MIN_RATING",
    "MAX_RATING",
    "MAX_COMMENT_LENGTH",
    "ReviewDraft",
    "Review",
    "RatingSummary",
    "validate_review",
    "rating_summary",
)
