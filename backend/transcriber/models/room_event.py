from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RoomEvent:
    """Transport-neutral view of one timeline event."""

    room_id: Optional[str]
    event_id: Optional[str]
    sender: Optional[str]
    event_type: str
    content: Dict[str, Any] = field(default_factory=dict)

    @property
    def msgtype(self) -> Optional[str]:
        return self.content.get("msgtype")

    @property
    def body(self) -> Optional[str]:
        return self.content.get("body")

    @property
    def content_url(self) -> Optional[str]:
        return self.content.get("url")
