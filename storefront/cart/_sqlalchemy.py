"""
SQLAlchemy cart store.

Merging relies on the (session_id, product_id) unique constraint: the add
is a single ``INSERT ... ON CONFLICT DO UPDATE`` so concurrent adds of the
same product sum instead of racing.
"""

import uuid

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront.db import CartLineRow
from storefront.errors import StorageError, InvalidQuantityError
from storefront.cart._types import CartLine, is_valid_quantity


class SQLAlchemyCartStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_lines(self, session_id: str) -> Result[list[CartLine], StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = select(CartLineRow).where(CartLineRow.session_id == session_id)
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_line(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to read cart: {e}", e))

    async def add_line(
        self, session_id: str, product_id: str, quantity: int
    ) -> Result[CartLine, InvalidQuantityError | StorageError]:
        if not is_valid_quantity(quantity):
            return Error(InvalidQuantityError(quantity))

        try:
            async with self._session_factory() as session:
                insert = sqlite_insert(CartLineRow).values(
                    id=uuid.uuid4().hex,
                    session_id=session_id,
                    product_id=product_id,
                    quantity=quantity,
                )
                stmt = insert.on_conflict_do_update(
                    index_elements=["session_id", "product_id"],
                    set_={"quantity": CartLineRow.quantity + insert.excluded.quantity},
                )
                await session.execute(stmt)
                await session.commit()

                row = (
                    await session.execute(
                        select(CartLineRow).where(
                            CartLineRow.session_id == session_id,
                            CartLineRow.product_id == product_id,
                        )
                    )
                ).scalar_one()
                return Ok(_to_line(row))
        except Exception as e:
            return Error(StorageError(f"Failed to add to cart: {e}", e))

    async def set_quantity(
        self, line_id: str, quantity: int
    ) -> Result[CartLine | None, InvalidQuantityError | StorageError]:
        if not is_valid_quantity(quantity):
            return Error(InvalidQuantityError(quantity))

        try:
            async with self._session_factory() as session:
                row = await session.get(CartLineRow, line_id)
                if row is None:
                    return Ok(None)
                row.quantity = quantity
                await session.commit()
                return Ok(_to_line(row))
        except Exception as e:
            return Error(StorageError(f"Failed to update cart line: {e}", e))

    async def remove(self, line_id: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CartLineRow, line_id)
                if row is None:
                    return Ok(False)
                await session.delete(row)
                await session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StorageError(f"Failed to remove cart line: {e}", e))

    async def clear(self, session_id: str) -> Result[None, StorageError]:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(CartLineRow).where(CartLineRow.session_id == session_id)
                )
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StorageError(f"Failed to clear cart: {e}", e))


def _to_line(row: CartLineRow) -> CartLine:
    return CartLine(
        id=row.id,
        session_id=row.session_id,
        product_id=row.product_id,
        quantity=row.quantity,
    )


__all__ = ("SQLAlchemyCartStore",)
