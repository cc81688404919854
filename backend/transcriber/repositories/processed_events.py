from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from transcriber.models.processed_event import ProcessedEvent


class ProcessedEventsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, event_id: str) -> Optional[ProcessedEvent]:
        return self.session.get(ProcessedEvent, event_id)

    def claim(self, event_id: str) -> bool:
        """Insert the ledger row for ``event_id``.

        The primary key is the only arbiter: a concurrent or earlier insert makes
        the commit fail with IntegrityError, which means the event is taken.
        """
        self.session.add(ProcessedEvent(event_id=event_id))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return False
        return True

    def update_transcript(
        self, event_id: str, user_display_name: Optional[str], transcription: Optional[str]
    ) -> Optional[ProcessedEvent]:
        row = self.get(event_id)
        if row is None:
            return None
        row.user_display_name = user_display_name
        row.transcription = transcription
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row
