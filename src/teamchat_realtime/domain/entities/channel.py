from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ChannelRef:
    id: UUID
    team_id: UUID
    name: str
