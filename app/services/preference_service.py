"""Notification preference service.

Preferences are stored and returned as-is; the dispatcher does not consult
them when creating notifications.
"""
from copy import deepcopy

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.repositories.user_repository import UserRepository
from app.schemas.notification import NotificationPreferences

DEFAULT_PREFERENCES = {
    "mentions": {"inApp": True, "email": False, "push": False},
    "replies": {"inApp": True, "email": False, "push": False},
    "reactions": {"inApp": True, "email": False, "push": False},
    "postApprovals": {"inApp": True, "email": True, "push": False},
    "groupInvites": {"inApp": True, "email": True, "push": False},
    "moderationActions": {"inApp": True, "email": True, "push": False},
    "systemAnnouncements": {"inApp": True, "email": True, "push": True},
    "quietHours": {"enabled": False, "start": "22:00", "end": "07:00"},
    "digest": {"enabled": True, "frequency": "weekly"},
}


class PreferenceService:
    """Read and replace a user's notification preferences."""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def get_preferences(self, user_id: int) -> NotificationPreferences:
        stored = self.user_repo.get_notification_settings(user_id)
        return NotificationPreferences.model_validate(stored or deepcopy(DEFAULT_PREFERENCES))

    def update_preferences(self, user_id: int, preferences: NotificationPreferences) -> NotificationPreferences:
        """Replace the user's preferences wholesale."""
        if not self.user_repo.set_notification_settings(user_id, preferences.model_dump(by_alias=True)):
            raise NotFoundError("User not found")
        return preferences
