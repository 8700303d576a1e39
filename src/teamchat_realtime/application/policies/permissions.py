from __future__ import annotations

from uuid import UUID

from teamchat_realtime.application.exceptions import ForbiddenError, NotFoundError
from teamchat_realtime.application.repositories.channels import ChannelReader
from teamchat_realtime.application.repositories.memberships import MembershipReader
from teamchat_realtime.domain.entities.channel import ChannelRef


async def assert_team_member(
    team_id: UUID,
    user_id: UUID,
    memberships: MembershipReader,
) -> None:
    if not await memberships.is_team_member(team_id, user_id):
        raise ForbiddenError("You are not a member of this team")


async def assert_channel_access(
    channel_id: UUID,
    user_id: UUID,
    channels: ChannelReader,
    memberships: MembershipReader,
) -> ChannelRef:
    """Raise if the channel doesn't exist or the user isn't in its team."""
    channel = await channels.get_by_id(channel_id)
    if channel is None:
        raise NotFoundError("Channel not found")
    await assert_team_member(channel.team_id, user_id, memberships)
    return channel
