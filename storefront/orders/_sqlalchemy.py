"""
SQLAlchemy order store.

Line items live in one JSON column. Decimals travel as strings so no
amount ever passes through a float.
"""

import json
import uuid
from decimal import Decimal
from typing import Any, cast

from sqlalchemy import func, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import utcnow, money
from storefront.db import OrderRow, aware
from storefront.errors import StorageError
from storefront.orders._types import (
    Order,
    OrderDraft,
    OrderLineItem,
    OrderStatus,
    StatusGuard,
    as_statuses,
)


class SQLAlchemyOrderStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, draft: OrderDraft) -> Result[Order, StorageError]:
        now = utcnow()
        row = OrderRow(
            id=uuid.uuid4().hex,
            session_id=draft.session_id,
            user_id=draft.user_id,
            email=draft.email,
            player_name=draft.player_name,
            original_amount=draft.original_amount,
            discount_amount=draft.discount_amount,
            total_amount=draft.total_amount,
            coupon_code=draft.coupon_code,
            status=OrderStatus.PENDING.value,
            payment_method=draft.payment_method,
            transaction_id=None,
            items=_dump_items(draft.items),
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                return Ok(_to_order(row))
        except Exception as e:
            return Error(StorageError(f"Failed to create order: {e}", e))

    async def get(self, order_id: str) -> Result[Order | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderRow, order_id)
                return Ok(_to_order(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get order: {e}", e))

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        transaction_id: str | None = None,
        payment_method: str | None = None,
        *,
        expected: StatusGuard | None = None,
    ) -> Result[Order | None, StorageError]:
        values: dict[str, Any] = {"status": status.value, "updated_at": utcnow()}
        if transaction_id:
            values["transaction_id"] = transaction_id
        if payment_method:
            values["payment_method"] = payment_method

        stmt = update(OrderRow).where(OrderRow.id == order_id)
        if expected is not None:
            stmt = stmt.where(OrderRow.status.in_([s.value for s in as_statuses(expected)]))
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        try:
            async with self._session_factory() as session:
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()

                if cursor.rowcount == 0:
                    return Ok(None)

                row = await session.get(OrderRow, order_id, populate_existing=True)
                return Ok(_to_order(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to update order: {e}", e))

    async def list_by_email(self, email: str) -> Result[list[Order], StorageError]:
        stmt = (
            select(OrderRow)
            .where(func.lower(OrderRow.email) == email.strip().lower())
            .order_by(OrderRow.created_at.desc())
        )
        return await self._list(stmt)

    async def list_by_session(self, session_id: str) -> Result[list[Order], StorageError]:
        stmt = (
            select(OrderRow)
            .where(OrderRow.session_id == session_id)
            .order_by(OrderRow.created_at.desc())
        )
        return await self._list(stmt)

    async def list_by_user(self, user_id: str) -> Result[list[Order], StorageError]:
        stmt = (
            select(OrderRow)
            .where(OrderRow.user_id == user_id)
            .order_by(OrderRow.created_at.desc())
        )
        return await self._list(stmt)

    async def list_all(self) -> Result[list[Order], StorageError]:
        return await self._list(select(OrderRow).order_by(OrderRow.created_at.desc()))

    async def _list(self, stmt) -> Result[list[Order], StorageError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_order(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list orders: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Conversion
# ═══════════════════════════════════════════════════════════════════════════════


def _dump_items(items: tuple[OrderLineItem, ...]) -> str:
    return json.dumps(
        [
            {
                "productId": i.product_id,
                "productName": i.product_name,
                "quantity": i.quantity,
                "unitPrice": str(i.unit_price),
                "totalPrice": str(i.total_price),
            }
            for i in items
        ]
    )


def _load_items(raw: str) -> tuple[OrderLineItem, ...]:
    return tuple(
        OrderLineItem(
            product_id=d["productId"],
            product_name=d["productName"],
            quantity=int(d["quantity"]),
            unit_price=money(Decimal(d["unitPrice"])),
            total_price=money(Decimal(d["totalPrice"])),
        )
        for d in json.loads(raw)
    )


def _to_order(row: OrderRow) -> Order:
    return Order(
        id=row.id,
        email=row.email,
        items=_load_items(row.items),
        original_amount=money(row.original_amount),
        discount_amount=money(row.discount_amount),
        total_amount=money(row.total_amount),
        status=OrderStatus(row.status),
        created_at=aware(row.created_at),
        updated_at=aware(row.updated_at),
        session_id=row.session_id,
        user_id=row.user_id,
        player_name=row.player_name,
        coupon_code=row.coupon_code,
        payment_method=row.payment_method,
        transaction_id=row.transaction_id,
    )


__all__ = ("SQLAlchemyOrderStore",)
