from __future__ import annotations

from uuid import UUID

from teamchat_realtime.application.exceptions import ValidationError
from teamchat_realtime.application.ports.presence import Connection, PresenceLookup
from teamchat_realtime.services.delivery import deliver


async def relay_typing(
    sender: Connection,
    presence: PresenceLookup,
    *,
    started: bool,
    channel_id: UUID | None = None,
    target_user_id: UUID | None = None,
) -> int:
    """Forward a typing hint to a channel room or a single user. Nothing is stored.

    Channel typing reaches only connections that joined the room, minus the
    sender. Returns the number of connections reached.
    """
    if (channel_id is None) == (target_user_id is None):
        raise ValidationError("Exactly one of channel_id or target_user_id is required")

    event_type = "user-typing" if started else "user-stopped-typing"
    data: dict[str, str] = {
        "user_id": str(sender.user_id),
        "username": sender.username,
    }

    if channel_id is not None:
        data["channel_id"] = str(channel_id)
        recipients = [
            c for c in presence.room_connections(channel_id)
            if c.user_id != sender.user_id
        ]
    else:
        target = presence.lookup(target_user_id)  # type: ignore[arg-type]
        recipients = [target] if target is not None and target.user_id != sender.user_id else []

    reached = 0
    for connection in recipients:
        if await deliver(connection, event_type, data):
            reached += 1
    return reached
