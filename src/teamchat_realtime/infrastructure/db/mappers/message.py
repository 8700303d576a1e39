from __future__ import annotations

from teamchat_realtime.domain.entities.message import ChannelMessage
from teamchat_realtime.infrastructure.db.models.message import ChannelMessageModel


def model_to_entity(model: ChannelMessageModel) -> ChannelMessage:
    return ChannelMessage(
        id=model.id,
        channel_id=model.channel_id,
        team_id=model.team_id,
        author_id=model.author_id,
        text=model.text,
        image_ref=model.image_ref,
        created_at=model.created_at,
    )


def entity_to_model(entity: ChannelMessage) -> ChannelMessageModel:
    return ChannelMessageModel(
        id=entity.id,
        channel_id=entity.channel_id,
        team_id=entity.team_id,
        author_id=entity.author_id,
        text=entity.text,
        image_ref=entity.image_ref,
        created_at=entity.created_at,
    )
