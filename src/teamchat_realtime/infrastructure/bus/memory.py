"""In-process broadcast bus: publish enqueues, a background task fans out."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

BroadcastCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


class InMemoryBroadcaster:
    """Implements application.ports.bus.EventPublisher for a single process."""

    def __init__(self, deliver: BroadcastCallback) -> None:
        self._deliver = deliver
        self._queue: asyncio.Queue[tuple[str, dict[str, Any]]] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        self._queue.put_nowait((event_type, payload))

    async def start(self) -> None:
        self._task = asyncio.create_task(self._drain(), name="memory-broadcaster")
        logger.info("In-memory broadcaster started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("In-memory broadcaster stopped")

    async def _drain(self) -> None:
        while True:
            event_type, payload = await self._queue.get()
            try:
                await self._deliver(event_type, payload)
            except Exception:
                logger.exception("Error broadcasting %s", event_type)
            finally:
                self._queue.task_done()
