from __future__ import annotations

from teamchat_realtime.domain.entities.channel import ChannelRef
from teamchat_realtime.domain.entities.membership import Membership
from teamchat_realtime.domain.value_objects.enums import MemberRole
from teamchat_realtime.infrastructure.db.models.channel import ChannelModel
from teamchat_realtime.infrastructure.db.models.membership import TeamMemberModel


def model_to_entity(model: TeamMemberModel) -> Membership:
    return Membership(
        team_id=model.team_id,
        user_id=model.user_id,
        role=MemberRole(model.role),
    )


def channel_to_entity(model: ChannelModel) -> ChannelRef:
    return ChannelRef(id=model.id, team_id=model.team_id, name=model.name)
