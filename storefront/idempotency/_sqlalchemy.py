"""
SQLAlchemy idempotency store.

``claim`` is ``INSERT ... ON CONFLICT (key) DO NOTHING``: the database, not
the application, decides which of two concurrent requests owns a key.
"""

from datetime import timedelta
from typing import Any, cast

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.db import IdempotencyKeyRow, aware
from storefront.errors import StorageError
from storefront.idempotency._types import RecordState, IdempotencyRecord


class SQLAlchemyIdempotencyStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Result[IdempotencyRecord | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(IdempotencyKeyRow, key)
                return Ok(_to_record(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get idempotency key: {e}", e))

    async def claim(
        self,
        key: str,
        input_hash: str | None,
        ttl: timedelta | None,
    ) -> Result[bool, StorageError]:
        now = utcnow()
        try:
            async with self._session_factory() as session:
                # An expired claim no longer protects anything
                existing = await session.get(IdempotencyKeyRow, key)
                if existing is not None and existing.expires_at is not None:
                    if aware(existing.expires_at) < now:
                        await session.execute(
                            delete(IdempotencyKeyRow).where(IdempotencyKeyRow.key == key)
                        )

                stmt = (
                    sqlite_insert(IdempotencyKeyRow)
                    .values(
                        key=key,
                        state=RecordState.PENDING.value,
                        reference=None,
                        input_hash=input_hash,
                        created_at=now,
                        expires_at=now + ttl if ttl else None,
                    )
                    .on_conflict_do_nothing(index_elements=["key"])
                )
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()
                return Ok(cursor.rowcount > 0)
        except Exception as e:
            return Error(StorageError(f"Failed to claim idempotency key: {e}", e))

    async def complete(self, key: str, reference: str) -> Result[None, StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    update(IdempotencyKeyRow)
                    .where(IdempotencyKeyRow.key == key)
                    .values(state=RecordState.COMPLETED.value, reference=reference)
                )
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()
                if cursor.rowcount == 0:
                    return Error(StorageError(f"No pending record for key: {key}"))
                return Ok(None)
        except Exception as e:
            return Error(StorageError(f"Failed to complete idempotency key: {e}", e))

    async def release(self, key: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = delete(IdempotencyKeyRow).where(IdempotencyKeyRow.key == key)
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()
                return Ok(cursor.rowcount > 0)
        except Exception as e:
            return Error(StorageError(f"Failed to release idempotency key: {e}", e))


def _to_record(row: IdempotencyKeyRow) -> IdempotencyRecord:
    return IdempotencyRecord(
        key=row.key,
        state=RecordState(row.state),
        reference=row.reference,
        input_hash=row.input_hash,
        created_at=aware(row.created_at),
        expires_at=aware(row.expires_at) if row.expires_at is not None else None,
    )


__all__ = ("SQLAlchemyIdempotencyStore",)
