"""
SQLAlchemy review store.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.db import ReviewRow, aware
from storefront.errors import StorageError
from storefront.reviews._types import Review, ReviewDraft


class SQLAlchemyReviewStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, draft: ReviewDraft) -> Result[Review, StorageError]:
        row = ReviewRow(
            id=uuid.uuid4().hex,
            product_id=draft.product_id,
            user_id=draft.user_id,
            rating=draft.rating,
            comment=draft.comment,
            created_at=utcnow(),
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                return Ok(_to_review(row))
        except Exception as e:
            return Error(StorageError(f"Failed to save review: {e}", e))

    async def get(self, review_id: str) -> Result[Review | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ReviewRow, review_id)
                return Ok(_to_review(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get review: {e}", e))

    async def list_by_product(self, product_id: str) -> Result[list[Review], StorageError]:
        stmt = (
            select(ReviewRow)
            .where(ReviewRow.product_id == product_id)
            .order_by(ReviewRow.created_at.desc())
        )
        return await self._list(stmt)

    async def list_by_user(self, user_id: str) -> Result[list[Review], StorageError]:
        stmt = (
            select(ReviewRow)
            .where(ReviewRow.user_id == user_id)
            .order_by(ReviewRow.created_at.desc())
        )
        return await self._list(stmt)

    async def delete(self, review_id: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ReviewRow, review_id)
                if row is None:
                    return Ok(False)
                await session.delete(row)
                await session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StorageError(f"Failed to delete review: {e}", e))

    async def _list(self, stmt) -> Result[list[Review], StorageError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_review(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list reviews: {e}", e))


def _to_review(row: ReviewRow) -> Review:
    return Review(
        id=row.id,
        product_id=row.product_id,
        user_id=row.user_id,
        rating=row.rating,
        comment=row.comment,
        created_at=aware(row.created_at),
    )


__all__ = ("SQLAlchemyReviewStore",)
