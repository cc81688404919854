from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Set

from transcriber.models.room_event import RoomEvent

logger = logging.getLogger(__name__)

Handler = Callable[[RoomEvent], Awaitable[object]]


class EventDispatcher:
    """Runs one task per event with at most ``max_concurrency`` in flight.

    Exceptions stop at the task boundary: they are logged and the event is dropped.
    """

    def __init__(self, handler: Handler, max_concurrency: int = 8) -> None:
        self._handler = handler
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def submit(self, event: RoomEvent) -> asyncio.Task:
        task = asyncio.create_task(self._run(event), name=f"event-{event.event_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, event: RoomEvent) -> None:
        async with self._semaphore:
            try:
                await self._handler(event)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unhandled error while processing event %s in room %s", event.event_id, event.room_id)

    async def drain(self) -> None:
        """Wait for every in-flight event task to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
