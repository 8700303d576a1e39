from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from teamchat_realtime.domain.entities.read_watermark import (
    ChannelReadWatermark,
    DMReadWatermark,
)


class ReadStateReader(Protocol):
    async def get_channel_watermark(
        self, user_id: UUID, channel_id: UUID
    ) -> ChannelReadWatermark | None: ...

    async def get_dm_watermark(
        self, user_id: UUID, other_user_id: UUID
    ) -> DMReadWatermark | None: ...


class ReadStateWriter(Protocol):
    async def upsert_channel_read(
        self, user_id: UUID, channel_id: UUID, read_at: datetime
    ) -> ChannelReadWatermark:
        """Atomic per key. Never moves an existing watermark backwards."""
        ...

    async def upsert_dm_read(
        self, user_id: UUID, other_user_id: UUID, read_at: datetime
    ) -> DMReadWatermark:
        """Atomic per key. Never moves an existing watermark backwards."""
        ...
