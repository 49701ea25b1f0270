"""
SQL document store for stats documents.

Implements the DocumentStore protocol over DatabaseService and the
`stats_documents` table. Documents are stored in their `to_dict()` form and
rebuilt into the category's dataclass on read; a NULL payload round-trips
as a cached absence.
"""

from __future__ import annotations

from typing import Optional, Type

from sqlalchemy.exc import SQLAlchemyError

from siegestats.core.database.service import DatabaseService
from siegestats.core.exceptions import DatabaseError, log_error
from siegestats.core.logging.logger import get_logger
from siegestats.modules.stats.interfaces import StoredDocument
from siegestats.modules.stats.models import (
    StatsCategory,
    StatsDocument,
    document_from_payload,
    document_to_payload,
)
from siegestats.modules.stats.repository import StatsDocumentRepository

logger = get_logger(__name__)


class SqlDocumentStore:
    """DocumentStore backed by SQLAlchemy async sessions."""

    def __init__(
        self,
        database_service: Type[DatabaseService] = DatabaseService,
        repository: Optional[StatsDocumentRepository] = None,
    ) -> None:
        self._db = database_service
        self._repo = repository or StatsDocumentRepository()

    @staticmethod
    def _failure(
        operation: str, category: StatsCategory, exc: SQLAlchemyError
    ) -> DatabaseError:
        error = DatabaseError(f"{operation} {category.value}", exc)
        log_error(logger, "Document store call failed", error, category=category.value)
        return error

    def is_online(self) -> bool:
        return self._db.is_healthy()

    async def get(self, category: StatsCategory, player_id: str) -> Optional[StoredDocument]:
        category = StatsCategory(category)
        try:
            async with self._db.get_session() as session:
                record = await self._repo.get_document(session, category.value, player_id)
                payload = record.payload if record is not None else None
        except SQLAlchemyError as exc:
            raise self._failure("get", category, exc) from exc

        if record is None:
            return None
        return StoredDocument(document_from_payload(category, payload))

    async def insert(
        self,
        category: StatsCategory,
        player_id: str,
        document: Optional[StatsDocument],
    ) -> None:
        await self._write("insert", StatsCategory(category), player_id, document)

    async def update(
        self,
        category: StatsCategory,
        player_id: str,
        document: Optional[StatsDocument],
    ) -> None:
        await self._write("update", StatsCategory(category), player_id, document)

    async def _write(
        self,
        operation: str,
        category: StatsCategory,
        player_id: str,
        document: Optional[StatsDocument],
    ) -> None:
        # insert and update converge on one upserted row per key, so concurrent
        # refreshes of a key never collide and the last commit wins
        payload = document_to_payload(document)
        try:
            async with self._db.get_transaction() as session:
                created = await self._repo.write_document(
                    session, category.value, player_id, payload
                )
        except SQLAlchemyError as exc:
            raise self._failure(operation, category, exc) from exc

        if created != (operation == "insert"):
            logger.info(
                "Document store write did not match row state",
                extra={
                    "write_operation": operation,
                    "category": category.value,
                    "row_created": created,
                },
            )
        logger.debug(
            "Stats document written",
            extra={
                "write_operation": operation,
                "category": category.value,
                "row_created": created,
                "absent": payload is None,
            },
        )
