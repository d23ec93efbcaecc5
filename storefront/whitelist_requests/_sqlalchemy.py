"""
SQLAlchemy whitelist request store.
"""

import uuid
from typing import Any, cast

from sqlalchemy import func, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import Decision, utcnow
from storefront.db import WhitelistRequestRow, aware
from storefront.errors import DuplicateWhitelistRequestError, StorageError
from storefront.whitelist_requests._types import WhitelistApplication, WhitelistRequest


class SQLAlchemyWhitelistRequestStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(
        self, application: WhitelistApplication
    ) -> Result[WhitelistRequest, DuplicateWhitelistRequestError | StorageError]:
        pending = select(WhitelistRequestRow.id).where(
            func.lower(WhitelistRequestRow.minecraft_username)
            == application.minecraft_username.lower(),
            WhitelistRequestRow.status == Decision.PENDING.value,
        )
        row = WhitelistRequestRow(
            id=uuid.uuid4().hex,
            minecraft_username=application.minecraft_username,
            email=application.email,
            discord_username=application.discord_username,
            user_id=application.user_id,
            status=Decision.PENDING.value,
            submitted_at=utcnow(),
        )
        try:
            async with self._session_factory() as session:
                if (await session.execute(pending)).first() is not None:
                    return Error(DuplicateWhitelistRequestError(application.minecraft_username))
                session.add(row)
                await session.commit()
                return Ok(_to_request(row))
        except Exception as e:
            return Error(StorageError(f"Failed to save whitelist request: {e}", e))

    async def get(self, request_id: str) -> Result[WhitelistRequest | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(WhitelistRequestRow, request_id)
                return Ok(_to_request(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get whitelist request: {e}", e))

    async def list_all(
        self, status: Decision | None = None
    ) -> Result[list[WhitelistRequest], StorageError]:
        stmt = select(WhitelistRequestRow).order_by(WhitelistRequestRow.submitted_at.desc())
        if status is not None:
            stmt = stmt.where(WhitelistRequestRow.status == status.value)
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_request(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list whitelist requests: {e}", e))

    async def decide(
        self,
        request_id: str,
        decision: Decision,
        processed_by: str | None,
        reason: str | None = None,
    ) -> Result[WhitelistRequest | None, StorageError]:
        stmt = (
            update(WhitelistRequestRow)
            .where(
                WhitelistRequestRow.id == request_id,
                WhitelistRequestRow.status == Decision.PENDING.value,
            )
            .values(
                status=decision.value,
                reason=reason,
                processed_at=utcnow(),
                processed_by=processed_by,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()

                if cursor.rowcount == 0:
                    return Ok(None)

                row = await session.get(WhitelistRequestRow, request_id, populate_existing=True)
                return Ok(_to_request(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to process whitelist request: {e}", e))


def _to_request(row: WhitelistRequestRow) -> WhitelistRequest:
    return WhitelistRequest(
        id=row.id,
        minecraft_username=row.minecraft_username,
        status=Decision(row.status),
        submitted_at=aware(row.submitted_at),
        email=row.email,
        discord_username=row.discord_username,
        user_id=row.user_id,
        reason=row.reason,
        processed_at=aware(row.processed_at) if row.processed_at is not None else None,
        processed_by=row.processed_by,
    )


__all__ = ("SQLAlchemyWhitelistRequestStore",)
