"""Persistence port used by every ledger component.

Wraps one AsyncSession and offers the CRUD primitives the services need:
find-by-id, find-by-natural-key, first dependent, save, delete, exists.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

ModelT = TypeVar("ModelT", bound=SQLModel)


class LedgerStore:
    """Thin async repository over a single session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed block atomically.

        Opens a transaction when none is active, otherwise a savepoint, so
        operations compose without committing a caller's outer transaction.
        """
        if self.session.in_transaction():
            async with self.session.begin_nested():
                yield
        else:
            async with self.session.begin():
                yield

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Savepoint whose failure leaves the surrounding transaction usable."""
        async with self.session.begin_nested():
            yield

    async def get(self, model: type[ModelT], entity_id: int) -> ModelT | None:
        return await self.session.get(model, entity_id)

    async def find_one(self, model: type[ModelT], *criteria: Any) -> ModelT | None:
        """Return the newest row matching ``criteria``, or None."""
        result = await self.session.execute(
            select(model)
            .where(*criteria)
            .order_by(model.created_at.desc(), model.id.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalars().first()

    async def find_first(self, model: type[ModelT], *criteria: Any) -> ModelT | None:
        """Return the lowest-id row matching ``criteria``, or None."""
        result = await self.session.execute(
            select(model)
            .where(*criteria)
            .order_by(model.id)  # type: ignore[arg-type,attr-defined]
            .limit(1)
        )
        return result.scalars().first()

    async def find_all(self, model: type[ModelT], *criteria: Any) -> Sequence[ModelT]:
        result = await self.session.execute(
            select(model).where(*criteria).order_by(model.id)  # type: ignore[arg-type,attr-defined]
        )
        return result.scalars().all()

    async def exists(self, model: type[ModelT], *criteria: Any) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(model).where(*criteria)
        )
        return result.scalar_one() > 0

    async def total(self, column: Any, *criteria: Any) -> Any:
        """SUM(column) over matching rows; None when nothing matches."""
        result = await self.session.execute(select(func.sum(column)).where(*criteria))
        return result.scalar_one()

    async def save(self, instance: ModelT) -> ModelT:
        """Add ``instance`` and flush so constraint violations surface here."""
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def delete(self, instance: SQLModel) -> None:
        await self.session.delete(instance)
        await self.session.flush()
