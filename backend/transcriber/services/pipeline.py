from __future__ import annotations

import json
import logging
from typing import Optional

from transcriber.models.room_event import RoomEvent
from transcriber.services.classifier import AudioCandidate, Command, classify
from transcriber.services.commands import CommandHandler
from transcriber.services.dedup import DedupGate
from transcriber.services.reply import ReplyEmitter
from transcriber.services.transcription_service import TranscriptionWorker

logger = logging.getLogger(__name__)


class EventPipeline:
    """classify -> command | dedup -> transcribe -> reply | drop"""

    def __init__(
        self,
        commands: CommandHandler,
        gate: DedupGate,
        worker: TranscriptionWorker,
        replies: ReplyEmitter,
    ) -> None:
        self._commands = commands
        self._gate = gate
        self._worker = worker
        self._replies = replies

    async def handle(self, event: RoomEvent) -> Optional[str]:
        """Process one event. Returns the transcript when a reply was attempted."""
        kind = classify(event)
        if isinstance(kind, Command):
            logger.info("Received command in room: %s", event.room_id)
            await self._commands.handle(event.room_id, event.event_id, kind.action)
            return None

        if not isinstance(kind, AudioCandidate):
            logger.debug("Ignoring event %s: %s", event.event_id, kind.reason)
            return None

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Audio message content: %s", json.dumps(event.content, indent=2))
        job = await self._gate.admit(event)
        if job is None:
            return None

        text = await self._worker.run(job)
        if not text:
            return None
        await self._replies.emit(job.room_id, job.event_id, text)
        return text
