from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

from transcriber.models.room_event import RoomEvent

ROOM_MESSAGE = "m.room.message"
MSGTYPE_TEXT = "m.text"
MSGTYPE_AUDIO = "m.audio"

ENABLE_COMMAND = "!enableTranscription"
DISABLE_COMMAND = "!disableTranscription"

CommandAction = Literal["enable", "disable"]

COMMANDS: dict[str, CommandAction] = {
    ENABLE_COMMAND: "enable",
    DISABLE_COMMAND: "disable",
}


@dataclass(frozen=True)
class Command:
    action: CommandAction


@dataclass(frozen=True)
class AudioCandidate:
    pass


@dataclass(frozen=True)
class Ignored:
    reason: str


Classification = Union[Command, AudioCandidate, Ignored]


def classify(event: RoomEvent) -> Classification:
    """Route an event to exactly one handling path. Never touches storage or network."""
    if event.event_type != ROOM_MESSAGE:
        return Ignored("not a room message")
    if not event.room_id or not event.event_id:
        return Ignored("missing room or event id")

    if event.msgtype == MSGTYPE_TEXT:
        body = event.body
        # exact, case-sensitive match only
        if isinstance(body, str) and body in COMMANDS:
            return Command(COMMANDS[body])
        return Ignored("plain text")

    if event.msgtype == MSGTYPE_AUDIO:
        return AudioCandidate()

    return Ignored(f"unhandled msgtype {event.msgtype!r}")
