from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class SendChannelMessageDTO:
    channel_id: UUID
    team_id: UUID | None = None
    text: str | None = None
    image_ref: str | None = None


@dataclass(frozen=True, slots=True)
class SendDirectMessageDTO:
    receiver_id: UUID
    text: str | None = None
    image_ref: str | None = None
