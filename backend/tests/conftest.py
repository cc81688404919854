from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from transcriber.config import Settings, load_settings
from transcriber.errors import SendError, TranscriptionError
from transcriber.models.base import create_db_engine
from transcriber.models.room_event import RoomEvent
from transcriber.services.commands import CommandHandler
from transcriber.services.dedup import DedupGate
from transcriber.services.pipeline import EventPipeline
from transcriber.services.reply import ReplyEmitter
from transcriber.services.store import DurableStore
from transcriber.services.transcription_service import TranscriptionWorker

AUDIO_BYTES = b"OggS\x00\x02fake-opus-payload"


class FakeChat:
    def __init__(
        self,
        display_names: Optional[Dict[str, str]] = None,
        room_names: Optional[Dict[str, str]] = None,
        logged_in: bool = True,
    ) -> None:
        self.display_names = display_names if display_names is not None else {"@alice:example.org": "Alice"}
        self.room_names = room_names or {}
        self.logged_in = logged_in
        self.messages: List[Tuple[str, Dict[str, Any]]] = []
        self.reactions: List[Tuple[str, str, str]] = []
        self.fail_sends = False
        self.on_event = None
        self.stopped = False
        self.closed = False

    async def start(self, on_event) -> None:
        self.on_event = on_event

    async def stop(self) -> None:
        self.stopped = True

    async def close(self) -> None:
        self.stopped = True
        self.closed = True

    def is_logged_in(self) -> bool:
        return self.logged_in

    async def get_display_name(self, user_id: str) -> Optional[str]:
        return self.display_names.get(user_id)

    def resolve_content_url(self, content_uri: str) -> Optional[str]:
        if not content_uri.startswith("mxc://"):
            return None
        return "https://matrix.example.org/_matrix/media/v3/download/" + content_uri[len("mxc://"):]

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": "Bearer test-token"}

    async def send_message(self, room_id: str, content: Dict[str, Any]) -> None:
        if self.closed:
            raise SendError("session is closed")
        if self.fail_sends:
            raise SendError("homeserver unavailable")
        self.messages.append((room_id, content))

    async def send_reaction(self, room_id: str, event_id: str, key: str) -> None:
        if self.fail_sends:
            raise SendError("homeserver unavailable")
        self.reactions.append((room_id, event_id, key))

    async def get_room_name(self, room_id: str) -> Optional[str]:
        return self.room_names.get(room_id)


class FakeSpeech:
    def __init__(self, text: str = "hello world", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[Path] = []
        self.seen_bytes: List[bytes] = []

    async def transcribe(self, audio_path: Path) -> str:
        self.calls.append(audio_path)
        self.seen_bytes.append(audio_path.read_bytes())
        if self.error is not None:
            raise self.error
        return self.text


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = AUDIO_BYTES) -> None:
        self.status_code = status_code
        self.reason = "OK" if status_code < 400 else "Not Found"
        self.ok = status_code < 400
        self._body = body

    def iter_content(self, chunk_size: int = 8192):
        for i in range(0, len(self._body), chunk_size):
            yield self._body[i:i + chunk_size]

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        return None


class FakeHttp:
    def __init__(self, status_code: int = 200, body: bytes = AUDIO_BYTES) -> None:
        self.status_code = status_code
        self.body = body
        self.requests: List[Dict[str, Any]] = []

    def get(self, url: str, headers=None, stream: bool = False, timeout=None) -> FakeResponse:
        self.requests.append({"url": url, "headers": headers, "stream": stream, "timeout": timeout})
        return FakeResponse(self.status_code, self.body)


def audio_event(
    event_id: str = "$E1",
    room_id: str = "!R1:example.org",
    sender: str = "@alice:example.org",
    url: Optional[str] = "mxc://example.org/abc123",
) -> RoomEvent:
    content: Dict[str, Any] = {"msgtype": "m.audio", "body": "Voice message.ogg"}
    if url is not None:
        content["url"] = url
    return RoomEvent(room_id=room_id, event_id=event_id, sender=sender, event_type="m.room.message", content=content)


def text_event(body: str, event_id: str = "$T1", room_id: str = "!R1:example.org") -> RoomEvent:
    return RoomEvent(
        room_id=room_id,
        event_id=event_id,
        sender="@alice:example.org",
        event_type="m.room.message",
        content={"msgtype": "m.text", "body": body},
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return load_settings(
        _env_file=None,
        openai_api_key="sk-test",
        matrix_base_url="https://matrix.example.org",
        matrix_user_id="@bot:example.org",
        matrix_access_token="test-token",
        db_file_path=tmp_path / "data" / "transcriptions.db",
        temp_dir=tmp_path / "temp",
    )


@pytest.fixture
def store(tmp_path: Path) -> DurableStore:
    s = DurableStore(create_db_engine(tmp_path / "transcriptions.db"))
    s.init()
    yield s
    s.close()


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def speech() -> FakeSpeech:
    return FakeSpeech()


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture
def worker(store: DurableStore, speech: FakeSpeech, temp_dir: Path, http: FakeHttp, chat: FakeChat) -> TranscriptionWorker:
    return TranscriptionWorker(store, speech, temp_dir, download_timeout=5.0, headers=chat.auth_headers(), session=http)


@pytest.fixture
def pipeline(store: DurableStore, chat: FakeChat, worker: TranscriptionWorker) -> EventPipeline:
    return EventPipeline(
        commands=CommandHandler(store, chat),
        gate=DedupGate(store, chat),
        worker=worker,
        replies=ReplyEmitter(chat),
    )
