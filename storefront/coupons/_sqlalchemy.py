"""
SQLAlchemy coupon store.

Redemption is a single guarded UPDATE:

    UPDATE coupons SET current_usages = current_usages + 1
     WHERE code = :code
       AND (max_usages IS NULL OR current_usages < max_usages)

and succeeds iff it touched a row. No read-then-write window exists.
"""

import uuid
from typing import Any, cast

from sqlalchemy import or_, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.db import CouponRow, aware
from storefront.errors import StorageError, DuplicateCouponError
from storefront.coupons._types import Coupon, CouponDraft, DiscountType


class SQLAlchemyCouponStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_code(self, code: str) -> Result[Coupon | None, StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = select(CouponRow).where(CouponRow.code == code)
                row = (await session.execute(stmt)).scalar_one_or_none()
                return Ok(_to_coupon(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get coupon: {e}", e))

    async def increment_usage(self, code: str) -> Result[Coupon | None, StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    update(CouponRow)
                    .where(
                        CouponRow.code == code,
                        or_(
                            CouponRow.max_usages.is_(None),
                            CouponRow.current_usages < CouponRow.max_usages,
                        ),
                    )
                    .values(
                        current_usages=CouponRow.current_usages + 1,
                        updated_at=utcnow(),
                    )
                    .execution_options(synchronize_session=False)
                )
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()

                if cursor.rowcount == 0:
                    return Ok(None)

                row = (
                    await session.execute(select(CouponRow).where(CouponRow.code == code))
                ).scalar_one_or_none()
                return Ok(_to_coupon(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to redeem coupon: {e}", e))

    async def get(self, coupon_id: str) -> Result[Coupon | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CouponRow, coupon_id)
                return Ok(_to_coupon(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get coupon: {e}", e))

    async def list_all(self) -> Result[list[Coupon], StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = select(CouponRow).order_by(CouponRow.created_at.desc())
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_coupon(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list coupons: {e}", e))

    async def create(
        self, draft: CouponDraft
    ) -> Result[Coupon, DuplicateCouponError | StorageError]:
        now = utcnow()
        row = CouponRow(
            id=uuid.uuid4().hex,
            code=draft.code,
            discount_type=draft.discount_type.value,
            discount_value=draft.discount_value,
            minimum_order_amount=draft.minimum_order_amount,
            max_usages=draft.max_usages,
            current_usages=0,
            valid_from=draft.valid_from,
            valid_until=draft.valid_until,
            is_active=draft.is_active,
            description=draft.description,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                return Ok(_to_coupon(row))
        except IntegrityError:
            return Error(DuplicateCouponError(draft.code))
        except Exception as e:
            return Error(StorageError(f"Failed to create coupon: {e}", e))

    async def set_active(
        self, coupon_id: str, active: bool
    ) -> Result[Coupon | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CouponRow, coupon_id)
                if row is None:
                    return Ok(None)
                row.is_active = active
                row.updated_at = utcnow()
                await session.commit()
                return Ok(_to_coupon(row))
        except Exception as e:
            return Error(StorageError(f"Failed to update coupon: {e}", e))

    async def delete(self, coupon_id: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CouponRow, coupon_id)
                if row is None:
                    return Ok(False)
                await session.delete(row)
                await session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StorageError(f"Failed to delete coupon: {e}", e))


def _to_coupon(row: CouponRow) -> Coupon:
    return Coupon(
        id=row.id,
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=row.discount_value,
        valid_from=aware(row.valid_from),
        valid_until=aware(row.valid_until),
        created_at=aware(row.created_at),
        updated_at=aware(row.updated_at),
        minimum_order_amount=row.minimum_order_amount,
        max_usages=row.max_usages,
        current_usages=row.current_usages,
        is_active=row.is_active,
        description=row.description,
    )


__all__ = ("SQLAlchemyCouponStore",)
