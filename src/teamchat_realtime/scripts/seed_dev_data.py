"""Seed development data: one team, a few users, channels and messages."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from teamchat_realtime.domain.entities.message import ChannelMessage
from teamchat_realtime.infrastructure.db.base import Base
from teamchat_realtime.infrastructure.db.models import (
    ChannelModel,
    TeamMemberModel,
    UserModel,
)
from teamchat_realtime.infrastructure.db.session import AsyncSessionLocal, engine
from teamchat_realtime.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

USERNAMES = ("alice", "bob", "carol")
CHANNEL_NAMES = ("general", "random")


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        team_id = uuid.uuid4()
        users = [UserModel(id=uuid.uuid4(), username=name) for name in USERNAMES]
        channels = [
            ChannelModel(id=uuid.uuid4(), team_id=team_id, name=name)
            for name in CHANNEL_NAMES
        ]
        session.add_all(users)
        session.add_all(channels)
        await session.flush()
        session.add_all(
            TeamMemberModel(
                team_id=team_id,
                user_id=user.id,
                role="admin" if i == 0 else "member",
            )
            for i, user in enumerate(users)
        )
        await session.flush()

        uow = SqlAlchemyUoW(session)
        alice, bob, carol = users
        general = channels[0]
        now = datetime.now(timezone.utc)
        messages_data = [
            (alice, "Morning everyone!"),
            (bob, "Hi @alice, standup in 10?"),
            (carol, "@Bob @alice on my way"),
        ]
        for i, (author, text) in enumerate(messages_data):
            await uow.messages_w.create(
                ChannelMessage(
                    id=uuid.uuid4(),
                    channel_id=general.id,
                    team_id=team_id,
                    author_id=author.id,
                    text=text,
                    image_ref=None,
                    created_at=now - timedelta(minutes=len(messages_data) - i),
                )
            )

        await uow.commit()
        logger.info(
            "Seeded team %s: users=%s channels=%s",
            team_id,
            {u.username: str(u.id) for u in users},
            {c.name: str(c.id) for c in channels},
        )


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
