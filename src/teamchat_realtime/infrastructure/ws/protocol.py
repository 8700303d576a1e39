"""WebSocket message envelope and inbound payload models."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # send-message | send-dm | mark-channel-read | typing-start | ...
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # receive-message | notification | user-status-changed | error | ...
    data: dict[str, Any] = {}


class ChannelPayload(BaseModel):
    channel_id: UUID


class ViewChannelPayload(BaseModel):
    channel_id: UUID | None = None


class ViewDMPayload(BaseModel):
    peer_id: UUID | None = None


class SendMessagePayload(BaseModel):
    channel_id: UUID
    team_id: UUID | None = None
    text: str | None = Field(default=None, max_length=4000)
    image_ref: str | None = Field(default=None, max_length=500)


class SendDMPayload(BaseModel):
    receiver_id: UUID
    text: str | None = Field(default=None, max_length=4000)
    image_ref: str | None = Field(default=None, max_length=500)


class MarkChannelReadPayload(BaseModel):
    channel_id: UUID
    read_at: datetime | None = None


class MarkDMReadPayload(BaseModel):
    peer_id: UUID
    read_at: datetime | None = None


class TypingPayload(BaseModel):
    channel_id: UUID | None = None
    target_user_id: UUID | None = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> TypingPayload:
        if (self.channel_id is None) == (self.target_user_id is None):
            raise ValueError("Exactly one of channel_id or target_user_id is required")
        return self
