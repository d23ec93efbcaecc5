"""
Review store — protocol and in-memory implementation.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Protocol

from kungfu import Result, Ok

from storefront._types import utcnow
from storefront.errors import StorageError
from storefront.reviews._types import Review, ReviewDraft


class ReviewStore(Protocol):
    async def add(self, draft: ReviewDraft) -> Result[Review, StorageError]: ...

    async def get(self, review_id: str) -> Result[Review | None, StorageError]: ...

    async def list_by_product(self, product_id: str) -> Result[list[Review], StorageError]:
        """Newest first."""
        ...

    async def list_by_user(self, user_id: str) -> Result[list[Review], StorageError]: ...

    async def delete(self, review_id: str) -> Result[bool, StorageError]: ...


def _newest_first(reviews: list[Review]) -> list[Review]:
    return sorted(reviews, key=lambda r: r.created_at, reverse=True)


class MemoryReviewStore:
    def __init__(self) -> None:
        self._reviews: dict[str, Review] = {}
        self._lock = asyncio.Lock()

    async def add(self, draft: ReviewDraft) -> Result[Review, StorageError]:
        async with self._lock:
            review = Review(
                id=uuid.uuid4().hex,
                product_id=draft.product_id,
                user_id=draft.user_id,
                rating=draft.rating,
                comment=draft.comment,
                created_at=utcnow(),
            )
            self._reviews[review.id] = review
            return Ok(review)

    async def get(self, review_id: str) -> Result[Review | None, StorageError]:
        async with self._lock:
            return Ok(self._reviews.get(review_id))

    async def list_by_product(self, product_id: str) -> Result[list[Review], StorageError]:
        async with self._lock:
            return Ok(_newest_first([r for r in self._reviews.values() if r.product_id == product_id]))

    async def list_by_user(self, user_id: str) -> Result[list[Review], StorageError]:
        async with self._lock:
            return Ok(_newest_first([r for r in self._reviews.values() if r.user_id == user_id]))

    async def delete(self, review_id: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(self._reviews.pop(review_id, None) is not None)


__all__ = ("ReviewStore", "MemoryReviewStore")
