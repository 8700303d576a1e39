"""Import all models so Base.metadata sees every table."""
from teamchat_realtime.infrastructure.db.models.channel import ChannelModel
from teamchat_realtime.infrastructure.db.models.direct_message import DirectMessageModel
from teamchat_realtime.infrastructure.db.models.membership import TeamMemberModel
from teamchat_realtime.infrastructure.db.models.message import ChannelMessageModel
from teamchat_realtime.infrastructure.db.models.notification import NotificationModel
from teamchat_realtime.infrastructure.db.models.read_state import ChannelReadModel, DMReadModel
from teamchat_realtime.infrastructure.db.models.user import UserModel

__all__ = [
    "ChannelMessageModel",
    "ChannelModel",
    "ChannelReadModel",
    "DMReadModel",
    "DirectMessageModel",
    "NotificationModel",
    "TeamMemberModel",
    "UserModel",
]
