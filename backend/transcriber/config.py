from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from transcriber.errors import ConfigError


class Settings(BaseSettings):
    app_name: str = "Matrix Transcriber"

    # Credentials and homeserver identity (required)
    openai_api_key: str = Field(min_length=1)
    matrix_base_url: str = Field(min_length=1)
    matrix_user_id: str = Field(min_length=1)
    matrix_access_token: str = Field(min_length=1)

    db_file_path: Path = Path("./transcriptions.db")
    temp_dir: Path = Path("./temp")

    host: str = "0.0.0.0"
    port: int = 3000

    whisper_model: str = "whisper-1"
    # Optional fixed language (e.g. "pl", "en"); None -> auto-detect
    transcription_language: Optional[str] = None
    reply_label: str = "Transkrypcja"

    max_concurrent_events: int = Field(default=8, ge=1)
    download_timeout_seconds: float = Field(default=60.0, gt=0)
    transcription_timeout_seconds: float = Field(default=120.0, gt=0)

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def ensure_dirs(self) -> None:
        dirs = [self.temp_dir, self.db_file_path.parent]
        if self.log_file is not None:
            dirs.append(self.log_file.parent)
        for d in dirs:
            d.mkdir(parents=True, exist_ok=True)


def load_settings(**overrides) -> Settings:
    """Read settings from the environment, turning validation failures into ConfigError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = sorted(
            str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")
        )
        raise ConfigError(f"Missing or invalid configuration: {', '.join(missing)}") from e
