from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from transcriber.models.room_event import RoomEvent

EventCallback = Callable[[RoomEvent], Awaitable[None]]


class ChatClient(Protocol):
    """What the pipeline and the health API need from the chat transport."""

    async def start(self, on_event: EventCallback) -> None: ...

    async def stop(self) -> None: ...

    async def close(self) -> None: ...

    def is_logged_in(self) -> bool: ...

    async def get_display_name(self, user_id: str) -> Optional[str]: ...

    def resolve_content_url(self, content_uri: str) -> Optional[str]: ...

    def auth_headers(self) -> Dict[str, str]: ...

    async def send_message(self, room_id: str, content: Dict[str, Any]) -> None: ...

    async def send_reaction(self, room_id: str, event_id: str, key: str) -> None: ...

    async def get_room_name(self, room_id: str) -> Optional[str]: ...
