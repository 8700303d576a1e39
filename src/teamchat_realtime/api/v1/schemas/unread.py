from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel


class ChannelUnread(BaseModel):
    channel_id: UUID
    count: int


class DMUnread(BaseModel):
    user_id: UUID
    count: int


class UnreadCountsResponse(BaseModel):
    channels: list[ChannelUnread]
    dms: list[DMUnread]
