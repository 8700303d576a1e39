from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from teamchat_realtime.domain.entities.message import ChannelMessage


class ChannelMessageReader(Protocol):
    async def list_messages(
        self,
        channel_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 100,
    ) -> list[ChannelMessage]:
        """Newest `limit` messages older than the cursor, returned oldest-first."""
        ...

    async def count_after(
        self,
        channel_id: UUID,
        after: datetime,
        *,
        exclude_author_id: UUID,
    ) -> int: ...


class ChannelMessageWriter(Protocol):
    async def create(self, message: ChannelMessage) -> ChannelMessage: ...
