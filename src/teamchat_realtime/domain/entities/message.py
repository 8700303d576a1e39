from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ChannelMessage:
    id: UUID
    channel_id: UUID
    team_id: UUID
    author_id: UUID
    text: str | None
    image_ref: str | None
    created_at: datetime
