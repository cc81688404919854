from __future__ import annotations

from fastapi import Request

from transcriber.runtime import Runtime
from transcriber.services.chat_client import ChatClient
from transcriber.services.store import DurableStore


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def get_store(request: Request) -> DurableStore:
    return get_runtime(request).store


def get_chat(request: Request) -> ChatClient:
    return get_runtime(request).chat
