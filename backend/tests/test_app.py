import asyncio

import pytest
from fastapi.testclient import TestClient

from conftest import FakeChat, FakeSpeech, audio_event
from transcriber.main import create_app
from transcriber.runtime import build_runtime


@pytest.fixture
def fake_chat():
    return FakeChat(room_names={"!R1:example.org": "Team Room"})


@pytest.fixture
def runtime(settings, fake_chat):
    return build_runtime(settings, chat=fake_chat, engine=FakeSpeech())


def test_health_reports_login_status(runtime, fake_chat) -> None:
    with TestClient(create_app(runtime=runtime)) as client:
        ok = client.get("/health")
        assert ok.status_code == 200
        assert ok.text == "OK"

        fake_chat.logged_in = False
        bad = client.get("/health")
        assert bad.status_code == 500
        assert bad.text == "Error"


def test_enabled_rooms_lists_names(runtime) -> None:
    with TestClient(create_app(runtime=runtime)) as client:
        runtime.store.set_room_enabled("!R1:example.org", True)
        runtime.store.set_room_enabled("!R2:example.org", True)
        runtime.store.set_room_enabled("!R3:example.org", False)

        response = client.get("/enabled-rooms")

    assert response.status_code == 200
    assert response.json() == [
        {"roomId": "!R1:example.org", "name": "Team Room"},
        {"roomId": "!R2:example.org", "name": None},
    ]


def test_lifecycle_initialises_and_tears_down(runtime, fake_chat, settings) -> None:
    with TestClient(create_app(runtime=runtime)):
        assert runtime.started is True
        assert settings.db_file_path.exists()
        assert settings.temp_dir.is_dir()
        assert fake_chat.on_event == runtime.dispatcher.submit

    assert fake_chat.closed is True
    assert runtime.started is False


class _SlowSpeech(FakeSpeech):
    def __init__(self) -> None:
        super().__init__()
        self.entered = asyncio.Event()

    async def transcribe(self, audio_path):
        self.entered.set()
        await asyncio.sleep(0.05)
        return await super().transcribe(audio_path)


@pytest.mark.asyncio
async def test_shutdown_lets_in_flight_replies_go_out(settings, fake_chat, http) -> None:
    speech = _SlowSpeech()
    runtime = build_runtime(settings, chat=fake_chat, engine=speech, http_session=http)
    await runtime.start()
    runtime.store.set_room_enabled("!R1:example.org", True)

    await runtime.dispatcher.submit(audio_event("$E1"))
    await speech.entered.wait()
    await runtime.stop()

    assert fake_chat.closed is True
    assert [c["m.relates_to"]["m.in_reply_to"]["event_id"] for _, c in fake_chat.messages] == ["$E1"]
