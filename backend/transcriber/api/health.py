from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from transcriber.deps import get_chat, get_store
from transcriber.services.chat_client import ChatClient
from transcriber.services.store import DurableStore

logger = logging.getLogger("transcriber.api")


router = APIRouter(tags=["health"])


class EnabledRoom(BaseModel):
    roomId: str
    name: Optional[str] = None


@router.get("/health", response_class=PlainTextResponse)
def health(chat: ChatClient = Depends(get_chat)) -> PlainTextResponse:
    if chat.is_logged_in():
        return PlainTextResponse("OK", status_code=200)
    return PlainTextResponse("Error", status_code=500)


@router.get("/enabled-rooms")
async def enabled_rooms(
    store: DurableStore = Depends(get_store),
    chat: ChatClient = Depends(get_chat),
) -> list[EnabledRoom]:
    room_ids = await asyncio.to_thread(store.list_enabled_rooms)
    names = await asyncio.gather(*(chat.get_room_name(room_id) for room_id in room_ids))
    return [EnabledRoom(roomId=room_id, name=name) for room_id, name in zip(room_ids, names)]
