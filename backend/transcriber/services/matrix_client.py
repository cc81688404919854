from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from mautrix.client import Client
from mautrix.errors import MatrixError
from mautrix.types import ContentURI, EventID, EventType, RoomID, UserID

from transcriber.config import Settings
from transcriber.errors import SendError
from transcriber.models.room_event import RoomEvent
from transcriber.services.chat_client import EventCallback

logger = logging.getLogger(__name__)


class MatrixChatClient:
    """mautrix-backed chat transport. Build once at startup, ``start()`` it, ``close()`` on shutdown."""

    def __init__(self, settings: Settings, client: Optional[Client] = None) -> None:
        self._settings = settings
        # Created in start(): the HTTP session must live on the running loop
        self._client = client
        self._sync_task: Optional[asyncio.Future] = None
        self._logged_in = False
        self._on_event: Optional[EventCallback] = None

    async def start(self, on_event: EventCallback) -> None:
        self._on_event = on_event
        if self._client is None:
            self._client = Client(
                mxid=UserID(self._settings.matrix_user_id),
                base_url=self._settings.matrix_base_url,
                token=self._settings.matrix_access_token,
            )
        try:
            whoami = await self._client.whoami()
            self._logged_in = True
            logger.info("Logged in to %s as %s", self._settings.matrix_base_url, whoami.user_id)
        except Exception as e:
            # Sync keeps retrying on its own; /health reports the failure
            logger.error("Matrix login check failed: %s", e)

        self._client.add_event_handler(EventType.ROOM_MESSAGE, self._handle_event)
        # Start from "now": history is not replayed on startup
        self._client.ignore_initial_sync = True
        self._sync_task = self._client.start(None)

    async def stop(self) -> None:
        """Stop receiving events. Sending stays available until close()."""
        self._logged_in = False
        if self._client is not None and self._sync_task is not None:
            self._client.stop()
        self._sync_task = None

    async def close(self) -> None:
        await self.stop()
        if self._client is not None:
            await self._client.api.session.close()

    def is_logged_in(self) -> bool:
        if not self._logged_in or self._client is None or not self._client.api.token:
            return False
        return self._sync_task is not None and not self._sync_task.done()

    async def _handle_event(self, evt) -> None:
        if self._on_event is None:
            return
        content = evt.content.serialize()
        event = RoomEvent(
            room_id=str(evt.room_id) if evt.room_id else None,
            event_id=str(evt.event_id) if evt.event_id else None,
            sender=str(evt.sender) if evt.sender else None,
            event_type=evt.type.t,
            content=content,
        )
        logger.debug("Received %s in room %s", event.event_type, event.room_id)
        await self._on_event(event)

    async def get_display_name(self, user_id: str) -> Optional[str]:
        try:
            return await self._client.get_displayname(UserID(user_id))
        except MatrixError as e:
            logger.warning("Could not resolve display name for %s: %s", user_id, e)
            return None

    def resolve_content_url(self, content_uri: str) -> Optional[str]:
        try:
            # v1 media endpoint, fetched with the bearer token from auth_headers()
            return str(self._client.api.get_download_url(ContentURI(content_uri), authenticated=True))
        except (ValueError, TypeError) as e:
            logger.warning("Could not resolve content URI %r: %s", content_uri, e)
            return None

    def auth_headers(self) -> Dict[str, str]:
        # Authenticated media endpoints require the access token
        return {"Authorization": f"Bearer {self._settings.matrix_access_token}"}

    async def send_message(self, room_id: str, content: Dict[str, Any]) -> None:
        try:
            await self._client.send_message_event(RoomID(room_id), EventType.ROOM_MESSAGE, content)
        except MatrixError as e:
            raise SendError(f"send to {room_id} failed: {e}") from e

    async def send_reaction(self, room_id: str, event_id: str, key: str) -> None:
        try:
            await self._client.react(RoomID(room_id), EventID(event_id), key)
        except MatrixError as e:
            raise SendError(f"reaction in {room_id} failed: {e}") from e

    async def get_room_name(self, room_id: str) -> Optional[str]:
        try:
            content = await self._client.get_state_event(RoomID(room_id), EventType.ROOM_NAME)
        except MatrixError:
            return None
        return getattr(content, "name", None) or None
