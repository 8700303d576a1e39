from __future__ import annotations

from typing import Any, Protocol


class EventPublisher(Protocol):
    """Fire-and-forget fan-out of a global event to every connection."""

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None: ...
