from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from transcriber.config import Settings
from transcriber.models.base import create_db_engine
from transcriber.services.chat_client import ChatClient
from transcriber.services.commands import CommandHandler
from transcriber.services.dedup import DedupGate
from transcriber.services.dispatcher import EventDispatcher
from transcriber.services.pipeline import EventPipeline
from transcriber.services.reply import ReplyEmitter
from transcriber.services.speech_engine import OpenAIWhisperEngine, SpeechToText, STTConfig
from transcriber.services.store import DurableStore
from transcriber.services.transcription_service import TranscriptionWorker

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Process-wide services, built once and owned by the entry point."""

    settings: Settings
    store: DurableStore
    chat: ChatClient
    engine: SpeechToText
    pipeline: EventPipeline
    dispatcher: EventDispatcher
    started: bool = False

    async def start(self) -> None:
        self.settings.ensure_dirs()
        self.store.init()
        await self.chat.start(self.dispatcher.submit)
        self.started = True
        logger.info("Transcriber started; database at %s", self.settings.db_file_path)

    async def stop(self) -> None:
        if not self.started:
            return
        self.started = False
        # In-flight events still need the transport to send their replies
        await self.chat.stop()
        await self.dispatcher.drain()
        await self.chat.close()
        close = getattr(self.engine, "close", None)
        if close is not None:
            await close()
        self.store.close()
        logger.info("Transcriber stopped")


def build_runtime(
    settings: Settings,
    chat: Optional[ChatClient] = None,
    engine: Optional[SpeechToText] = None,
    store: Optional[DurableStore] = None,
    http_session: Optional[requests.Session] = None,
) -> Runtime:
    if store is None:
        store = DurableStore(create_db_engine(settings.db_file_path))
    if chat is None:
        from transcriber.services.matrix_client import MatrixChatClient

        chat = MatrixChatClient(settings)
    if engine is None:
        engine = OpenAIWhisperEngine(settings.openai_api_key, STTConfig.from_settings(settings))

    worker = TranscriptionWorker(
        store,
        engine,
        settings.temp_dir,
        download_timeout=settings.download_timeout_seconds,
        headers=chat.auth_headers(),
        session=http_session,
    )
    pipeline = EventPipeline(
        commands=CommandHandler(store, chat),
        gate=DedupGate(store, chat),
        worker=worker,
        replies=ReplyEmitter(chat, settings.reply_label),
    )
    dispatcher = EventDispatcher(pipeline.handle, settings.max_concurrent_events)
    return Runtime(
        settings=settings,
        store=store,
        chat=chat,
        engine=engine,
        pipeline=pipeline,
        dispatcher=dispatcher,
    )
