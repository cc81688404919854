from __future__ import annotations


class TranscriberError(Exception):
    """Base class for errors raised by the transcription bot."""


class ConfigError(TranscriberError):
    """Required configuration is missing or invalid. Fatal at startup."""


class StorageError(TranscriberError):
    """A database operation failed. Aborts handling of the current event."""


class FetchError(TranscriberError):
    """The audio resource could not be downloaded."""


class TranscriptionError(TranscriberError):
    """The speech-to-text service did not return a transcript."""


class SendError(TranscriberError):
    """A message or reaction could not be delivered to the room."""
