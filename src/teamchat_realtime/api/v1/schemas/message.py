from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ChannelMessageResponse(BaseModel):
    id: UUID
    channel_id: UUID
    team_id: UUID
    author_id: UUID
    text: str | None
    image_ref: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class DirectMessageResponse(BaseModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: str | None
    image_ref: str | None
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ChannelMessagePage(BaseModel):
    """One page of history, oldest-first; `next_cursor` fetches older messages."""

    items: list[ChannelMessageResponse]
    next_cursor: str | None = None
