from __future__ import annotations

from enum import StrEnum


class UserStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class MemberRole(StrEnum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class NotificationType(StrEnum):
    MESSAGE = "message"
    MENTION = "mention"
    DM = "dm"


class NotificationPriority(StrEnum):
    HIGH = "high"
    NORMAL = "normal"


class UnreadKind(StrEnum):
    CHANNEL = "channel"
    DM = "dm"
