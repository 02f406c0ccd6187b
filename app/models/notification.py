"""Notification model."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum

from app.core.database import Base


class NotificationType(str, Enum):
    MENTION = "mention"
    REPLY = "reply"
    REACTION = "reaction"
    POST_APPROVED = "post_approved"
    POST_REJECTED = "post_rejected"
    POST_CREATED = "post_created"
    GROUP_INVITE = "group_invite"
    GROUP_JOIN_REQUEST = "group_join_request"
    MODERATION_ACTION = "moderation_action"
    SYSTEM_ANNOUNCEMENT = "system_announcement"


class NotificationStatus(str, Enum):
    """scheduled → delivered on first read, never back."""
    SCHEDULED = "scheduled"
    DELIVERED = "delivered"


class Notification(Base):
    """Per-user notification. read_at is the authoritative read marker."""

    __tablename__ = "notifications"

    id            = Column(Integer, primary_key=True, index=True)
    user_id       = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type          = Column(
        SQLEnum(NotificationType, values_callable=lambda x: [e.value for e in x], name="notification_type"),
        nullable=False,
    )
    title         = Column(String(255), nullable=False)
    message       = Column(Text, nullable=False)
    # "metadata" is reserved on declarative models
    meta          = Column("metadata", JSON, nullable=False, default=dict)   # {"data": {...}, "actionUrl": "/posts/1"}
    status        = Column(
        SQLEnum(NotificationStatus, values_callable=lambda x: [e.value for e in x], name="notification_status"),
        default=NotificationStatus.SCHEDULED,
        nullable=False,
    )
    scheduled_for = Column(DateTime(timezone=True), nullable=False)
    read_at       = Column(DateTime(timezone=True), nullable=True)
    created_at    = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_notifications_user_read", "user_id", "read_at"),
    )

    user = relationship("User", back_populates="notifications")

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @property
    def data(self) -> dict:
        return (self.meta or {}).get("data") or {}

    @property
    def action_url(self):
        return (self.meta or {}).get("actionUrl")
