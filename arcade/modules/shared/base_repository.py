"""
Base Repository Pattern

Purpose
-------
Type-safe, generic repository abstraction for database access following
SQLAlchemy 2.0 async patterns. Repositories encapsulate queries; they never
commit and never contain business rules.

Design Notes
------------
- Every method receives the session from the caller, so the same repository
  works inside read sessions and write transactions alike
- Pessimistic locking via ``for_update=True`` (``SELECT ... FOR UPDATE``;
  ignored by SQLite)
- Debug logging for every query with the model name

Usage
-----
    from arcade.database.models import ScoreRecord
    from arcade.modules.shared import BaseRepository

    class ScoreRepository(BaseRepository[ScoreRecord]):
        async def find_by_player(self, session, player_id):
            return await self.find_many_where(
                session, ScoreRecord.player_id == player_id
            )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository for type-safe database operations.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages
    """

    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    async def get(
        self, session: AsyncSession, id_value: Any, for_update: bool = False
    ) -> Optional[T]:
        """
        Get a single record by primary key.

        Args:
            session: Database session
            id_value: Primary key value
            for_update: If True, use SELECT FOR UPDATE

        Returns:
            Model instance or None if not found
        """
        stmt = select(self.model_class).where(
            self.model_class.id == id_value  # type: ignore[attr-defined]
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.get: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": id_value,
                "found": instance is not None,
                "locked": for_update,
            },
        )
        return instance

    async def find_one_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        for_update: bool = False,
    ) -> Optional[T]:
        """Find a single record matching conditions (None if absent)."""
        stmt = select(self.model_class).where(*conditions)
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.find_one_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found": instance is not None,
                "locked": for_update,
            },
        )
        return instance

    async def find_many_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[List[Any]] = None,
        limit: Optional[int] = None,
    ) -> List[T]:
        """
        Find multiple records matching conditions.

        Args:
            session: Database session
            *conditions: SQLAlchemy filter conditions
            order_by: Optional ordering clauses
            limit: Optional maximum number of results

        Returns:
            List of model instances
        """
        stmt = select(self.model_class).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await session.execute(stmt)
        instances = list(result.scalars().all())

        self.log.debug(
            f"Repository.find_many_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found_count": len(instances),
                "limit": limit,
            },
        )
        return instances

    async def scalar_values_where(
        self,
        session: AsyncSession,
        column: InstrumentedAttribute,
        *conditions: ColumnElement[bool],
    ) -> List[Any]:
        """Return a single column's values for matching rows, in storage order."""
        stmt = select(column).where(*conditions)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def exists(
        self, session: AsyncSession, *conditions: ColumnElement[bool]
    ) -> bool:
        count = await self.count(session, *conditions)
        return count > 0

    async def count(
        self, session: AsyncSession, *conditions: ColumnElement[bool]
    ) -> int:
        """Count records matching conditions."""
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        result = await session.execute(stmt)
        count = result.scalar_one()

        self.log.debug(
            f"Repository.count: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__, "count": count},
        )
        return count

    def add(self, session: AsyncSession, instance: T) -> T:
        session.add(instance)
        self.log.debug(
            f"Repository.add: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )
        return instance

    async def flush(self, session: AsyncSession) -> None:
        """Flush pending changes so constraint violations surface now."""
        await session.flush()
        self.log.debug(
            f"Repository.flush: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )
