from __future__ import annotations

from pathlib import Path

from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine

# Table models must be imported before create_all
from transcriber.models.room_setting import RoomSetting  # noqa: F401
from transcriber.models.processed_event import ProcessedEvent  # noqa: F401


def create_db_engine(database_path: Path) -> Engine:
    # SQLite shared across the event loop's worker threads
    return create_engine(
        f"sqlite:///{database_path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )


def init_db(engine: Engine) -> None:
    # Enable WAL
    with engine.begin() as conn:
        conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
        conn.exec_driver_sql("PRAGMA synchronous=NORMAL;")
    SQLModel.metadata.create_all(engine)
