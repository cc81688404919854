from __future__ import annotations

from sqlmodel import SQLModel, Field


class RoomSetting(SQLModel, table=True):
    __tablename__ = "room_settings"

    room_id: str = Field(primary_key=True)
    transcription_enabled: bool = Field(default=False)
