from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from openai import AsyncOpenAI, NOT_GIVEN, OpenAIError

from transcriber.config import Settings
from transcriber.errors import TranscriptionError

logger = logging.getLogger(__name__)


class SpeechToText(Protocol):
    async def transcribe(self, audio_path: Path) -> str: ...


@dataclass
class STTConfig:
    model_id: str = "whisper-1"
    language: Optional[str] = None
    timeout: float = 120.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "STTConfig":
        return cls(
            model_id=settings.whisper_model,
            language=settings.transcription_language or None,
            timeout=settings.transcription_timeout_seconds,
        )


class OpenAIWhisperEngine:
    """Thin wrapper around the OpenAI audio transcription endpoint."""

    def __init__(self, api_key: str, cfg: Optional[STTConfig] = None, client: Optional[AsyncOpenAI] = None) -> None:
        self._cfg = cfg or STTConfig()
        self._client = client or AsyncOpenAI(api_key=api_key)

    async def transcribe(self, audio_path: Path) -> str:
        """Send one audio file and return the transcript text.

        Single attempt; any client or API failure becomes TranscriptionError.
        """
        try:
            with audio_path.open("rb") as fh:
                result = await self._client.audio.transcriptions.create(
                    model=self._cfg.model_id,
                    file=fh,
                    language=self._cfg.language or NOT_GIVEN,
                    timeout=self._cfg.timeout,
                )
        except (OpenAIError, OSError) as e:
            raise TranscriptionError(f"transcription of {audio_path.name} failed: {e}") from e

        text = getattr(result, "text", None)
        if text is None:
            raise TranscriptionError(f"transcription of {audio_path.name} returned no text")
        return text

    async def close(self) -> None:
        await self._client.close()
