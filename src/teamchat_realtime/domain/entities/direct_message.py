from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class DirectMessage:
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: str | None
    image_ref: str | None
    read: bool
    created_at: datetime
