from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teamchat_realtime.domain.entities.direct_message import DirectMessage
from teamchat_realtime.infrastructure.db.mappers import direct_message as mapper
from teamchat_realtime.infrastructure.db.models.direct_message import DirectMessageModel


class DirectMessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_conversation(
        self,
        user_id: UUID,
        peer_id: UUID,
        *,
        limit: int = 100,
    ) -> list[DirectMessage]:
        stmt = (
            select(DirectMessageModel)
            .where(
                or_(
                    and_(
                        DirectMessageModel.sender_id == user_id,
                        DirectMessageModel.receiver_id == peer_id,
                    ),
                    and_(
                        DirectMessageModel.sender_id == peer_id,
                        DirectMessageModel.receiver_id == user_id,
                    ),
                )
            )
            .order_by(DirectMessageModel.created_at.desc(), DirectMessageModel.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        newest_first = [mapper.model_to_entity(m) for m in result.scalars().all()]
        return list(reversed(newest_first))

    async def count_from_after(
        self,
        sender_id: UUID,
        receiver_id: UUID,
        after: datetime,
    ) -> int:
        stmt = select(func.count(DirectMessageModel.id)).where(
            DirectMessageModel.sender_id == sender_id,
            DirectMessageModel.receiver_id == receiver_id,
            DirectMessageModel.created_at > after,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def list_sender_ids_to(self, receiver_id: UUID) -> list[UUID]:
        stmt = (
            select(DirectMessageModel.sender_id)
            .where(DirectMessageModel.receiver_id == receiver_id)
            .distinct()
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class DirectMessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: DirectMessage) -> DirectMessage:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(
        self,
        sender_id: UUID,
        receiver_id: UUID,
        up_to: datetime,
    ) -> int:
        stmt = (
            update(DirectMessageModel)
            .where(
                DirectMessageModel.sender_id == sender_id,
                DirectMessageModel.receiver_id == receiver_id,
                DirectMessageModel.created_at <= up_to,
                DirectMessageModel.read.is_(False),
            )
            .values(read=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
