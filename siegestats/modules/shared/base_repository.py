"""
Base Repository Pattern

Purpose
-------
Type-safe, generic repository abstraction over SQLAlchemy 2.0 async
sessions. Repositories encapsulate data access and give every model the same
logged read and write surface.

Design Notes
------------
- Primary keys may be composite: `get()` accepts whatever
  `AsyncSession.get()` accepts (a scalar or a tuple)
- Sessions and transactions are owned by the caller (DatabaseService)
- `upsert()` is a single INSERT ... ON CONFLICT DO UPDATE statement, so
  concurrent writers of one key never collide on the primary key; the last
  one to commit wins
- No business logic; every operation emits a debug log

Usage
-----
    class StatsDocumentRepository(BaseRepository[StatsDocumentRecord]):
        async def write_document(self, session, category, player_id, payload):
            return await self.upsert(
                session,
                {"category": category, "player_id": player_id, "payload": payload},
                conflict_columns=("category", "player_id"),
                update_columns=("payload",),
            )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy.dialects import postgresql, sqlite

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy import Row
    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")

# Dialects whose INSERT supports ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BaseRepository(Generic[T]):
    """
    Generic base repository.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages
    """

    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    async def get(self, session: AsyncSession, id_value: Any) -> Optional[T]:
        """
        Get a single record by primary key (no lock).

        Args:
            session: Database session
            id_value: Primary key value, or a tuple for composite keys

        Returns:
            Model instance or None if not found
        """
        instance = await session.get(self.model_class, id_value)

        self.log.debug(
            f"Repository.get: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": str(id_value),
                "found": instance is not None,
            },
        )
        return instance

    async def upsert(
        self,
        session: AsyncSession,
        values: Dict[str, Any],
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
        returning: Sequence[str] = (),
    ) -> Optional[Row]:
        """
        Insert `values`, or overwrite `update_columns` of the conflicting row.

        Args:
            session: Database session inside a transaction
            values: Column values for the new row
            conflict_columns: Unique columns that identify the row
            update_columns: Columns replaced when the row already exists
            returning: Columns to return from the written row

        Returns:
            The returned row when `returning` is given, else None

        Raises:
            ValueError: The session's dialect has no ON CONFLICT support
        """
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise ValueError(f"Upsert is not supported on the {dialect!r} dialect")

        stmt = insert(self.model_class).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={column: stmt.excluded[column] for column in update_columns},
        )
        if returning:
            stmt = stmt.returning(*(getattr(self.model_class, c) for c in returning))

        result = await session.execute(stmt)
        row = result.one() if returning else None

        self.log.debug(
            f"Repository.upsert: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__, "dialect": dialect},
        )
        return row
