from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessedEvent(SQLModel, table=True):
    """Dedup ledger row. Its existence marks the event as claimed."""

    __tablename__ = "processed_events"

    event_id: str = Field(primary_key=True)
    user_display_name: Optional[str] = None
    transcription: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
