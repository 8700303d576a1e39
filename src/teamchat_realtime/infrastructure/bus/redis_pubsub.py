"""Redis Pub/Sub broadcast bus shared by every server process."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError

from teamchat_realtime.infrastructure.bus.memory import BroadcastCallback
from teamchat_realtime.infrastructure.bus.serializer import deserialize_event, serialize_event

logger = logging.getLogger(__name__)

RESUBSCRIBE_DELAY_SECONDS = 1.0


class RedisBroadcaster:
    """EventPublisher whose events reach local connections of every process.

    `publish` only writes to Redis; the subscriber task of each process
    (this one included) receives the message and hands it to `deliver`.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        deliver: BroadcastCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._deliver = deliver
        self._task: asyncio.Task[None] | None = None

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        await self._redis.publish(self._channel, serialize_event(event_type, payload))

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="redis-broadcaster")
        logger.info("Redis broadcaster started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Redis broadcaster stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self._listen()
            except RedisConnectionError:
                logger.warning(
                    "Lost Redis subscription on %s, retrying in %.1fs",
                    self._channel,
                    RESUBSCRIBE_DELAY_SECONDS,
                )
                await asyncio.sleep(RESUBSCRIBE_DELAY_SECONDS)

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    event_type, data = deserialize_event(message["data"])
                    await self._deliver(event_type, data)
                except Exception:
                    logger.exception("Dropping broadcast from %s", self._channel)
        finally:
            await pubsub.aclose()
