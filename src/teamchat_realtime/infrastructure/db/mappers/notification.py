from __future__ import annotations

from teamchat_realtime.domain.entities.notification import Notification
from teamchat_realtime.domain.value_objects.enums import NotificationType
from teamchat_realtime.infrastructure.db.models.notification import NotificationModel


def model_to_entity(model: NotificationModel) -> Notification:
    return Notification(
        id=model.id,
        user_id=model.user_id,
        type=NotificationType(model.type),
        title=model.title,
        body=model.body,
        from_user_id=model.from_user_id,
        from_username=model.from_username,
        created_at=model.created_at,
        channel_id=model.channel_id,
        channel_name=model.channel_name,
        read=model.read,
    )


def entity_to_model(entity: Notification) -> NotificationModel:
    return NotificationModel(
        id=entity.id,
        user_id=entity.user_id,
        type=entity.type.value,
        title=entity.title,
        body=entity.body,
        channel_id=entity.channel_id,
        channel_name=entity.channel_name,
        from_user_id=entity.from_user_id,
        from_username=entity.from_username,
        read=entity.read,
        created_at=entity.created_at,
    )
