from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from transcriber.models.room_event import RoomEvent
from transcriber.services.chat_client import ChatClient
from transcriber.services.store import DurableStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioJob:
    """An audio event this task has claimed and now owns."""

    room_id: str
    event_id: str
    download_url: str
    display_name: str


class DedupGate:
    def __init__(self, store: DurableStore, chat: ChatClient) -> None:
        self._store = store
        self._chat = chat

    async def admit(self, event: RoomEvent) -> Optional[AudioJob]:
        """Decide whether this task may process the audio event.

        Order matters: enablement first, then sender/URL resolution, then the
        claim. Only a successful claim yields a job.
        """
        room_id, event_id = event.room_id, event.event_id
        if not room_id or not event_id:
            return None

        enabled = await asyncio.to_thread(self._store.get_room_enabled, room_id)
        if not enabled:
            logger.info("Transcription is disabled for room: %s", room_id)
            return None

        display_name = await self._chat.get_display_name(event.sender) if event.sender else None
        content_url = event.content_url
        download_url = self._chat.resolve_content_url(content_url) if isinstance(content_url, str) else None
        if not download_url or not display_name:
            logger.warning(
                "Dropping audio event %s in %s: url=%s display_name=%s",
                event_id, room_id, bool(download_url), bool(display_name),
            )
            return None

        claimed = await asyncio.to_thread(self._store.try_claim_event, event_id)
        if not claimed:
            logger.info("Event %s has already been processed", event_id)
            return None

        logger.info("Claimed audio event %s from %s in room %s", event_id, display_name, room_id)
        return AudioJob(room_id=room_id, event_id=event_id, download_url=download_url, display_name=display_name)
