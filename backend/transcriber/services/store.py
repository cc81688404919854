from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from transcriber.errors import StorageError
from transcriber.models.base import init_db
from transcriber.models.processed_event import ProcessedEvent
from transcriber.repositories.processed_events import ProcessedEventsRepository
from transcriber.repositories.room_settings import RoomSettingsRepository

logger = logging.getLogger(__name__)


class DurableStore:
    """Room settings and the processed-events ledger.

    Every call opens its own session, so one store can be shared by all event
    tasks. Database failures surface as StorageError.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def init(self) -> None:
        with self._guard("init"):
            init_db(self._engine)

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _session(self, op: str) -> Iterator[Session]:
        with self._guard(op):
            with Session(self._engine) as session:
                yield session

    @contextmanager
    def _guard(self, op: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("Storage operation %s failed: %s", op, e)
            raise StorageError(f"{op} failed: {e}") from e

    # Room settings

    def set_room_enabled(self, room_id: str, enabled: bool) -> None:
        with self._session("set_room_enabled") as session:
            RoomSettingsRepository(session).upsert(room_id, enabled)

    def get_room_enabled(self, room_id: str) -> bool:
        with self._session("get_room_enabled") as session:
            row = RoomSettingsRepository(session).get(room_id)
            return bool(row and row.transcription_enabled)

    def list_enabled_rooms(self) -> list[str]:
        with self._session("list_enabled_rooms") as session:
            return [row.room_id for row in RoomSettingsRepository(session).list_enabled()]

    # Processed events

    def try_claim_event(self, event_id: str) -> bool:
        with self._session("try_claim_event") as session:
            return ProcessedEventsRepository(session).claim(event_id)

    def record_transcript(self, event_id: str, display_name: Optional[str], text: Optional[str]) -> None:
        with self._session("record_transcript") as session:
            row = ProcessedEventsRepository(session).update_transcript(event_id, display_name, text)
        if row is None:
            raise StorageError(f"record_transcript failed: event {event_id} was never claimed")

    def get_processed_event(self, event_id: str) -> Optional[ProcessedEvent]:
        with self._session("get_processed_event") as session:
            row = ProcessedEventsRepository(session).get(event_id)
            if row is not None:
                session.expunge(row)
            return row
