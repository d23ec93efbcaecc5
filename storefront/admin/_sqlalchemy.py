"""
SQLAlchemy admin whitelist store.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import utcnow
from storefront.db import AdminEntryRow, aware
from storefront.errors import StorageError
from storefront.admin._types import AdminEntry


class SQLAlchemyAdminStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def contains(self, email: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                return Ok(await session.get(AdminEntryRow, email.lower()) is not None)
        except Exception as e:
            return Error(StorageError(f"Failed to check whitelist: {e}", e))

    async def add(self, email: str, role: str = "admin") -> Result[AdminEntry, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(AdminEntryRow, email.lower())
                if row is None:
                    row = AdminEntryRow(email=email.lower(), role=role, created_at=utcnow())
                    session.add(row)
                else:
                    row.role = role
                await session.commit()
                return Ok(_to_entry(row))
        except Exception as e:
            return Error(StorageError(f"Failed to add admin: {e}", e))

    async def remove(self, email: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(AdminEntryRow, email.lower())
                if row is None:
                    return Ok(False)
                await session.delete(row)
                await session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StorageError(f"Failed to remove admin: {e}", e))

    async def list_all(self) -> Result[list[AdminEntry], StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = select(AdminEntryRow).order_by(AdminEntryRow.created_at)
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_entry(r) for r in rows])
        except Exception as e:
            return Error(StorageError(f"Failed to list admins: {e}", e))


def _to_entry(row: AdminEntryRow) -> AdminEntry:
    return AdminEntry(email=row.email, role=row.role, created_at=aware(row.created_at))


__all__ = ("SQLAlchemyAdminStore",)
