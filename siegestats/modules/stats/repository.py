from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from siegestats.core.logging.logger import get_logger
from siegestats.modules.shared.base_repository import BaseRepository
from siegestats.modules.stats.model import StatsDocumentRecord, utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class StatsDocumentRepository(BaseRepository[StatsDocumentRecord]):
    """Data access for `stats_documents`."""

    def __init__(self) -> None:
        super().__init__(StatsDocumentRecord, get_logger(__name__))

    async def get_document(
        self, session: AsyncSession, category: str, player_id: str
    ) -> Optional[StatsDocumentRecord]:
        return await self.get(session, (category, player_id))

    async def write_document(
        self,
        session: AsyncSession,
        category: str,
        player_id: str,
        payload: Optional[Dict[str, Any]],
    ) -> bool:
        """Upsert one document; True when the row did not exist before."""
        now = utcnow()
        row = await self.upsert(
            session,
            {
                "category": category,
                "player_id": player_id,
                "payload": payload,
                "created_at": now,
                "updated_at": now,
            },
            conflict_columns=("category", "player_id"),
            update_columns=("payload", "updated_at"),
            returning=("created_at", "updated_at"),
        )
        # An overwritten row keeps its original created_at
        return row.created_at == row.updated_at
