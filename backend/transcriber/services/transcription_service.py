from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Dict, Optional

import requests

from transcriber.errors import FetchError, TranscriptionError
from transcriber.services.dedup import AudioJob
from transcriber.services.speech_engine import SpeechToText
from transcriber.services.store import DurableStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


def download_to_file(
    url: str,
    dest_path: Path,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 60.0,
    session: Optional[requests.Session] = None,
) -> int:
    """Stream ``url`` into ``dest_path``. Returns the number of bytes written."""
    http = session or requests
    written = 0
    try:
        with http.get(url, headers=headers, stream=True, timeout=timeout) as response:
            if not response.ok:
                raise FetchError(f"Failed to fetch audio file: {response.status_code} {response.reason}")
            with open(dest_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch audio file: {e}") from e
    except OSError as e:
        raise FetchError(f"Failed to write audio file {dest_path}: {e}") from e
    return written


class TranscriptionWorker:
    """Download, transcribe and record one claimed audio event."""

    def __init__(
        self,
        store: DurableStore,
        engine: SpeechToText,
        temp_dir: Path,
        download_timeout: float = 60.0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._store = store
        self._engine = engine
        self._temp_dir = temp_dir
        self._download_timeout = download_timeout
        self._headers = headers or {}
        self._session = session

    def _scratch_path(self) -> Path:
        return self._temp_dir / f"{uuid.uuid4()}.ogg"

    async def run(self, job: AudioJob) -> Optional[str]:
        """Return the transcript, or None when the fetch or the speech call failed.

        The event stays claimed either way. StorageError is not caught here.
        """
        logger.info("Starting transcription for URL: %s, User: %s", job.download_url, job.display_name)
        audio_path = self._scratch_path()
        try:
            try:
                await asyncio.to_thread(self._temp_dir.mkdir, parents=True, exist_ok=True)
            except OSError as e:
                raise FetchError(f"Cannot create scratch directory {self._temp_dir}: {e}") from e
            size = await asyncio.to_thread(
                download_to_file,
                job.download_url,
                audio_path,
                self._headers,
                self._download_timeout,
                self._session,
            )
            logger.info("Downloaded audio file to %s (%d bytes)", audio_path, size)

            text = await self._engine.transcribe(audio_path)
            logger.info("Received transcription for %s (%d chars)", job.event_id, len(text))
        except (FetchError, TranscriptionError) as e:
            logger.error("Error processing audio event %s: %s", job.event_id, e)
            return None
        finally:
            self._cleanup(audio_path)

        await asyncio.to_thread(self._store.record_transcript, job.event_id, job.display_name, text)
        return text

    def _cleanup(self, audio_path: Path) -> None:
        try:
            audio_path.unlink(missing_ok=True)
            logger.debug("Deleted temporary audio file: %s", audio_path)
        except OSError as e:
            logger.warning("Could not delete temporary audio file %s: %s", audio_path, e)
