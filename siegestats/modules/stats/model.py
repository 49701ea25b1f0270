"""ORM model for persisted stats documents."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from siegestats.core.database.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatsDocumentRecord(Base):
    """
    One row per (category, player_id).

    `payload` is the document's JSON form; NULL records a known absence.
    """

    __tablename__ = "stats_documents"

    category: Mapped[str] = mapped_column(String(32), primary_key=True)
    player_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (Index("ix_stats_documents_player_id", "player_id"),)

    def __repr__(self) -> str:
        return (
            f"<StatsDocumentRecord(category={self.category!r}, "
            f"player_id={self.player_id!r})>"
        )
