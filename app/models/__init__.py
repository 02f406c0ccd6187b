"""Database models."""
from app.models.user import User
from app.models.group import Group, GroupMember, GroupVisibility, MemberRole, MemberStatus
from app.models.post import Post, Comment, PostStatus
from app.models.reaction import Reaction, TargetType
from app.models.notification import Notification, NotificationType, NotificationStatus
from app.models.subscription import Subscription

__all__ = [
    "User",
    "Group",
    "GroupMember",
    "GroupVisibility",
    "MemberRole",
    "MemberStatus",
    "Post",
    "Comment",
    "PostStatus",
    "Reaction",
    "TargetType",
    "Notification",
    "NotificationType",
    "NotificationStatus",
    "Subscription",
]
