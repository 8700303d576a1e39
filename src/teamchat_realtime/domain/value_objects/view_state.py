from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(slots=True)
class ViewState:
    """Which single conversation a connection currently has open.

    Owned by one connection task. Channel and DM views are mutually exclusive.
    """

    current_channel_id: UUID | None = None
    current_dm_peer_id: UUID | None = None

    def set_viewing_channel(self, channel_id: UUID | None) -> None:
        self.current_channel_id = channel_id
        self.current_dm_peer_id = None

    def set_viewing_dm(self, peer_id: UUID | None) -> None:
        self.current_dm_peer_id = peer_id
        self.current_channel_id = None

    def clear(self) -> None:
        self.current_channel_id = None
        self.current_dm_peer_id = None

    def is_viewing_channel(self, channel_id: UUID) -> bool:
        return self.current_channel_id is not None and self.current_channel_id == channel_id

    def is_viewing_dm(self, peer_id: UUID) -> bool:
        return self.current_dm_peer_id is not None and self.current_dm_peer_id == peer_id
