from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID


@dataclass(frozen=True, slots=True)
class UnreadCounts:
    """Strictly positive unread counts per channel and per DM peer."""

    channels: dict[UUID, int] = field(default_factory=dict)
    dms: dict[UUID, int] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "channels": [
                {"channel_id": str(cid), "count": count}
                for cid, count in self.channels.items()
            ],
            "dms": [
                {"user_id": str(uid), "count": count}
                for uid, count in self.dms.items()
            ],
        }
