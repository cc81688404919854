from __future__ import annotations

import asyncio
import logging

from transcriber.errors import SendError, StorageError
from transcriber.services.chat_client import ChatClient
from transcriber.services.classifier import CommandAction
from transcriber.services.store import DurableStore

logger = logging.getLogger(__name__)

ACK_REACTION = "✅"


class CommandHandler:
    def __init__(self, store: DurableStore, chat: ChatClient) -> None:
        self._store = store
        self._chat = chat

    async def handle(self, room_id: str, event_id: str, action: CommandAction) -> bool:
        """Apply an enable/disable command and acknowledge it.

        Returns True when the setting was stored. Repeating a command is harmless.
        """
        enabled = action == "enable"
        logger.info("%s transcription for room %s", "Enabling" if enabled else "Disabling", room_id)
        try:
            await asyncio.to_thread(self._store.set_room_enabled, room_id, enabled)
        except StorageError:
            logger.exception("Could not store transcription setting for room %s; no ack sent", room_id)
            return False

        try:
            await self._chat.send_reaction(room_id, event_id, ACK_REACTION)
        except SendError as e:
            logger.error("Could not acknowledge command %s in room %s: %s", event_id, room_id, e)
        logger.info("Transcription %s for room %s", "enabled" if enabled else "disabled", room_id)
        return True
