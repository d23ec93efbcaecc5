"""
SQLAlchemy payment confirmation store.

A verdict is written with ``UPDATE ... WHERE status = 'pending'``, so a
confirmation is decided once even when two admins click at the same time.
"""

import uuid
from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import Decision, utcnow
from storefront.db import PaymentConfirmationRow, aware
from storefront.errors import StorageError
from storefront.payments._types import PaymentConfirmation


class SQLAlchemyConfirmationStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(
        self, order_id: str, screenshot_ref: str
    ) -> Result[PaymentConfirmation, StorageError]:
        row = PaymentConfirmationRow(
            id=uuid.uuid4().hex,
            order_id=order_id,
            screenshot_ref=screenshot_ref,
            status=Decision.PENDING.value,
            submitted_at=utcnow(),
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                return Ok(_to_confirmation(row))
        except Exception as e:
            return Error(StorageError(f"Failed to save payment confirmation: {e}", e))

    async def get(self, confirmation_id: str) -> Result[PaymentConfirmation | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(PaymentConfirmationRow, confirmation_id)
                return Ok(_to_confirmation(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get payment confirmation: {e}", e))

    async def list_by_order(self, order_id: str) -> Result[list[PaymentConfirmation], StorageError]:
        stmt = (
            select(PaymentConfirmationRow)
            .where(PaymentConfirmationRow.order_id == order_id)
            .order_by(PaymentConfirmationRow.submitted_at.desc())
        )
        return await self._list(stmt)

    async def list_all(self) -> Result[list[PaymentConfirmation], StorageError]:
        stmt = select(PaymentConfirmationRow).order_by(PaymentConfirmationRow.submitted_at.desc())
        return await self._list(stmt)

    async def decide(
        self,
        confirmation_id: str,
        decision: Decision,
        reviewed_by: str | None,
        rejection_reason: str | None = None,
    ) -> Result[PaymentConfirmation | None, StorageError]:
        stmt = (
            update(PaymentConfirmationRow)
            .where(
                PaymentConfirmationRow.id == confirmation_id,
                PaymentConfirmationRow.status == Decision.PENDING.value,
            )
            .values(
                status=decision.value,
                reviewed_at=utcnow(),
                reviewed_by=reviewed_by,
                rejection_reason=rejection_reason,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()

                if cursor.rowcount == 0:
                    return Ok(None)

                row = await session.get(
                    PaymentConfirmationRow, confirmation_id, populate_existing=True
                )
                return Ok(_to_confirmation(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to review payment confirmation: {e}", e))

    async def _list(self, stmt) -> Result[list[PaymentConfirmation], StorageError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_confirmation(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list payment confirmations: {e}", e))


def _to_confirmation(row: PaymentConfirmationRow) -> PaymentConfirmation:
    return PaymentConfirmation(
        id=row.id,
        order_id=row.order_id,
        screenshot_ref=row.screenshot_ref,
        status=Decision(row.status),
        submitted_at=aware(row.submitted_at),
        reviewed_at=aware(row.reviewed_at) if row.reviewed_at is not None else None,
        reviewed_by=row.reviewed_by,
        rejection_reason=row.rejection_reason,
    )


__all__ = ("SQLAlchemyConfirmationStore",)
