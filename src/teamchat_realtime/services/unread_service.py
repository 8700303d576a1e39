from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.application.dto.unread import UnreadCounts
from teamchat_realtime.application.exceptions import NotFoundError
from teamchat_realtime.application.policies.permissions import assert_channel_access
from teamchat_realtime.application.ports.clock import EPOCH, Clock, SystemClock
from teamchat_realtime.application.uow import UnitOfWork

_system_clock = SystemClock()


async def channel_unread(user_id: UUID, channel_id: UUID, uow: UnitOfWork) -> int:
    """Messages in the channel newer than the user's watermark, excluding their own."""
    watermark = await uow.read_state.get_channel_watermark(user_id, channel_id)
    after = watermark.last_read_at if watermark else EPOCH
    return await uow.messages.count_after(channel_id, after, exclude_author_id=user_id)


async def dm_unread(user_id: UUID, peer_id: UUID, uow: UnitOfWork) -> int:
    """DMs from `peer_id` to `user_id` newer than the user's watermark for that peer."""
    watermark = await uow.read_state.get_dm_watermark(user_id, peer_id)
    after = watermark.last_read_at if watermark else EPOCH
    return await uow.direct_messages.count_from_after(peer_id, user_id, after)


def _effective_read_at(requested: datetime | None, now: datetime) -> datetime:
    if requested is None:
        return now
    if requested.tzinfo is None:
        requested = requested.replace(tzinfo=timezone.utc)
    return min(requested, now)


async def mark_channel_read(
    channel_id: UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    read_at: datetime | None = None,
    clock: Clock = _system_clock,
) -> int:
    """Advance the channel watermark and return the resulting unread count."""
    await assert_channel_access(
        channel_id, principal.user_id, uow.channels, uow.memberships,
    )
    await uow.read_state_w.upsert_channel_read(
        principal.user_id,
        channel_id,
        _effective_read_at(read_at, clock.now()),
    )
    await uow.commit()
    return await channel_unread(principal.user_id, channel_id, uow)


async def mark_dm_read(
    peer_id: UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    read_at: datetime | None = None,
    clock: Clock = _system_clock,
) -> int:
    """Advance the (reader, peer) watermark only; the peer's own watermark is untouched."""
    peer = await uow.users.get_by_id(peer_id)
    if peer is None:
        raise NotFoundError("User not found")

    watermark = await uow.read_state_w.upsert_dm_read(
        principal.user_id,
        peer_id,
        _effective_read_at(read_at, clock.now()),
    )
    await uow.direct_messages_w.mark_read(
        peer_id, principal.user_id, watermark.last_read_at,
    )
    await uow.commit()
    return await dm_unread(principal.user_id, peer_id, uow)


async def all_unread_counts(principal: Principal, uow: UnitOfWork) -> UnreadCounts:
    user_id = principal.user_id
    counts = UnreadCounts()

    team_ids = await uow.memberships.list_team_ids_for_user(user_id)
    for channel in await uow.channels.list_for_teams(team_ids):
        count = await channel_unread(user_id, channel.id, uow)
        if count > 0:
            counts.channels[channel.id] = count

    for peer_id in await uow.direct_messages.list_sender_ids_to(user_id):
        count = await dm_unread(user_id, peer_id, uow)
        if count > 0:
            counts.dms[peer_id] = count

    return counts
