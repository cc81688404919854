from __future__ import annotations

from sqlalchemy.dialects.sqlite import insert
from sqlmodel import Session, select

from transcriber.models.room_setting import RoomSetting


class RoomSettingsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, room_id: str) -> RoomSetting | None:
        return self.session.get(RoomSetting, room_id)

    def upsert(self, room_id: str, enabled: bool) -> None:
        # Single statement so two first-time commands for a room cannot collide
        statement = (
            insert(RoomSetting)
            .values(room_id=room_id, transcription_enabled=enabled)
            .on_conflict_do_update(
                index_elements=["room_id"],
                set_={"transcription_enabled": enabled},
            )
        )
        self.session.execute(statement)
        self.session.commit()

    def list_enabled(self) -> list[RoomSetting]:
        statement = (
            select(RoomSetting)
            .where(RoomSetting.transcription_enabled == True)  # noqa: E712
            .order_by(RoomSetting.room_id)
        )
        return list(self.session.exec(statement))
