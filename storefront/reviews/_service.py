"""
Product reviews — signed-in players rate what they bought.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront.errors import (
    AccessDeniedError,
    InvalidReviewError,
    NotFoundError,
    StorageError,
)
from storefront.admin import Capabilities, Requester
from storefront.catalog import CatalogStore
from storefront.reviews._types import (
    Review,
    ReviewDraft,
    RatingSummary,
    validate_review,
    rating_summary,
)
from storefront.reviews._store import ReviewStore

logger = logging.getLogger(__name__)


class ProductReviews:
    def __init__(
        self,
        store: ReviewStore,
        catalog: CatalogStore,
        capabilities: Capabilities,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._capabilities = capabilities

    async def post(
        self, requester: Requester, product_id: str, rating: int, comment: str
    ) -> Result[
        Review, AccessDeniedError | InvalidReviewError | NotFoundError | StorageError
    ]:
        if not requester.user_id:
            return Error(AccessDeniedError("Sign in to review products"))

        match validate_review(ReviewDraft(product_id, requester.user_id, rating, comment)):
            case Error(e):
                return Error(e)
            case Ok(draft):
                pass

        match await self._catalog.get(product_id):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Product", product_id))
            case Ok(_):
                pass

        logger.info("User %s reviewed %s: %d stars", requester.user_id, product_id, draft.rating)
        return await self._store.add(draft)

    async def for_product(self, product_id: str) -> Result[list[Review], StorageError]:
        return await self._store.list_by_product(product_id)

    async def summary(self, product_id: str) -> Result[RatingSummary, StorageError]:
        match await self._store.list_by_product(product_id):
            case Error(e):
                return Error(e)
            case Ok(reviews):
                return Ok(rating_summary(reviews))

    async def for_user(
        self, requester: Requester
    ) -> Result[list[Review], AccessDeniedError | StorageError]:
        if not requester.user_id:
            return Error(AccessDeniedError("Sign in to see your reviews"))
        return await self._store.list_by_user(requester.user_id)

    async def delete(
        self, requester: Requester, review_id: str
    ) -> Result[bool, AccessDeniedError | NotFoundError | StorageError]:
        """The author or an admin may delete a review."""
        match await self._store.get(review_id):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(NotFoundError("Review", review_id))
            case Ok(review):
                pass

        if not (requester.user_id and requester.user_id == review.user_id):
            match await self._capabilities.require_admin(requester):
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass

        return await self._store.delete(review_id)


__all__ = ("ProductReviews",)
