from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ChannelReadWatermark:
    user_id: UUID
    channel_id: UUID
    last_read_at: datetime


@dataclass(frozen=True, slots=True)
class DMReadWatermark:
    """Directional: (user_id, other_user_id) is independent of the reverse pair."""

    user_id: UUID
    other_user_id: UUID
    last_read_at: datetime
