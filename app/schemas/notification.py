"""Notification schemas."""
from typing import Any, Dict, Literal, Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.notification import NotificationType, NotificationStatus


class NotificationEvent(BaseModel):
    """
    Semantic event handed to the dispatcher.

    actor_id is the user who caused the event; the dispatcher never
    delivers an event to its own actor.
    """
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    action_url: Optional[str] = None
    actor_id: Optional[int] = None


class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    is_read: bool
    data: Dict[str, Any] = Field(default_factory=dict)
    action_url: Optional[str] = None
    scheduled_for: datetime
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
    pagination: Pagination


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int


# ----------------------------------------------------------------------
# Preferences (camelCase on the wire and in storage)
# ----------------------------------------------------------------------

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ChannelFlags(_CamelModel):
    in_app: bool
    email: bool
    push: bool


class QuietHours(_CamelModel):
    enabled: bool
    start: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    end: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class Digest(_CamelModel):
    enabled: bool
    frequency: Literal["daily", "weekly", "monthly"]


class NotificationPreferences(_CamelModel):
    """Full preference record; updates replace it wholesale."""
    mentions: ChannelFlags
    replies: ChannelFlags
    reactions: ChannelFlags
    post_approvals: ChannelFlags
    group_invites: ChannelFlags
    moderation_actions: ChannelFlags
    system_announcements: ChannelFlags
    quiet_hours: QuietHours
    digest: Digest
