from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.value_objects.enums import UserStatus
from teamchat_realtime.infrastructure.db.mappers import identity as mapper
from teamchat_realtime.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> Identity | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None

    async def get_many(self, user_ids: list[UUID]) -> list[Identity]:
        if not user_ids:
            return []
        stmt = select(UserModel).where(UserModel.id.in_(user_ids))
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class UserWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def set_status(self, user_id: UUID, status: UserStatus) -> None:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(status=status.value)
        )
        await self._session.execute(stmt)
