from __future__ import annotations

import html
import logging
from typing import Any, Dict

from transcriber.errors import SendError
from transcriber.services.chat_client import ChatClient

logger = logging.getLogger(__name__)

HTML_FORMAT = "org.matrix.custom.html"


def build_reply_content(text: str, event_id: str, label: str = "Transkrypcja") -> Dict[str, Any]:
    return {
        "msgtype": "m.text",
        "body": f"{label}:\n{text}",
        "format": HTML_FORMAT,
        "formatted_body": f"<strong>{html.escape(label)}</strong>:\n{html.escape(text)}",
        "m.relates_to": {"m.in_reply_to": {"event_id": event_id}},
    }


class ReplyEmitter:
    def __init__(self, chat: ChatClient, label: str = "Transkrypcja") -> None:
        self._chat = chat
        self._label = label

    async def emit(self, room_id: str, event_id: str, text: str) -> bool:
        content = build_reply_content(text, event_id, self._label)
        try:
            await self._chat.send_message(room_id, content)
        except SendError as e:
            logger.error("Could not send transcript reply for %s in room %s: %s", event_id, room_id, e)
            return False
        logger.info("Sent transcript reply for %s in room %s", event_id, room_id)
        return True
