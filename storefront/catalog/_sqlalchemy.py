"""
SQLAlchemy catalog store.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront.db import ProductRow
from storefront.errors import StorageError
from storefront.catalog._types import Product


class SQLAlchemyCatalog:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, product_id: str) -> Result[Product | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ProductRow, product_id)
                return Ok(_to_product(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get product: {e}", e))

    async def list_all(self) -> Result[list[Product], StorageError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(select(ProductRow))).scalars().all()
                return Ok([_to_product(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list products: {e}", e))

    async def list_by_category(self, category: str) -> Result[list[Product], StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = select(ProductRow).where(ProductRow.category == category)
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_product(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list category {category}: {e}", e))

    async def add(self, product: Product) -> Result[Product, StorageError]:
        try:
            async with self._session_factory() as session:
                session.add(
                    ProductRow(
                        id=product.id,
                        name=product.name,
                        description=product.description,
                        price=product.price,
                        category=product.category,
                        featured=product.featured,
                        image_url=product.image_url,
                    )
                )
                await session.commit()
                return Ok(product)
        except Exception as e:
            return Error(StorageError(f"Failed to add product: {e}", e))


def _to_product(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        price=row.price,
        category=row.category,
        featured=row.featured,
        description=row.description,
        image_url=row.image_url,
    )


__all__ = ("SQLAlchemyCatalog",)
