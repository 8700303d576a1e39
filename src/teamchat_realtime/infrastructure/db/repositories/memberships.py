from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamchat_realtime.domain.entities.channel import ChannelRef
from teamchat_realtime.domain.entities.membership import Membership
from teamchat_realtime.infrastructure.db.mappers import membership as mapper
from teamchat_realtime.infrastructure.db.models.channel import ChannelModel
from teamchat_realtime.infrastructure.db.models.membership import TeamMemberModel


class MembershipReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def is_team_member(self, team_id: UUID, user_id: UUID) -> bool:
        stmt = (
            select(TeamMemberModel.id)
            .where(
                TeamMemberModel.team_id == team_id,
                TeamMemberModel.user_id == user_id,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_team_members(self, team_id: UUID) -> list[Membership]:
        stmt = select(TeamMemberModel).where(TeamMemberModel.team_id == team_id)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_team_ids_for_user(self, user_id: UUID) -> list[UUID]:
        stmt = select(TeamMemberModel.team_id).where(TeamMemberModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class ChannelReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, channel_id: UUID) -> ChannelRef | None:
        result = await self._session.get(ChannelModel, channel_id)
        return mapper.channel_to_entity(result) if result else None

    async def list_for_teams(self, team_ids: list[UUID]) -> list[ChannelRef]:
        if not team_ids:
            return []
        stmt = (
            select(ChannelModel)
            .where(ChannelModel.team_id.in_(team_ids))
            .order_by(ChannelModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.channel_to_entity(m) for m in result.scalars().all()]
