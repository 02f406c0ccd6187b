"""Notification inbox service."""
import math

from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, NotFoundError
from app.models.notification import Notification
from app.repositories.notification_repository import NotificationRepository


class InboxService:
    """Read / manage a user's notifications (used by API endpoints)."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository(db)

    def list_notifications(self, user_id: int, page: int = 1, limit: int = 20,
                           unread_only: bool = False) -> dict:
        """
        One page of the inbox, newest first.

        ``total`` honours ``unread_only``; ``unread_count`` is always over the
        whole inbox.
        """
        skip = (page - 1) * limit
        notifications = self.repo.get_by_user(user_id, skip=skip, limit=limit, unread_only=unread_only)
        total = self.repo.count_by_user(user_id, unread_only=unread_only)
        return {
            "notifications": notifications,
            "unread_count": self.repo.get_unread_count(user_id),
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    def get_unread_count(self, user_id: int) -> int:
        return self.repo.get_unread_count(user_id)

    def _get_owned(self, user_id: int, notification_id: int) -> Notification:
        notification = self.repo.get_by_id(notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if notification.user_id != user_id:
            raise ForbiddenError("Not authorized to access this notification")
        return notification

    def mark_read(self, user_id: int, notification_id: int) -> Notification:
        """
        Raises:
            NotFoundError: If the notification does not exist
            ForbiddenError: If it belongs to another user
        """
        notification = self._get_owned(user_id, notification_id)
        return self.repo.mark_read(notification)

    def mark_all_read(self, user_id: int) -> int:
        return self.repo.mark_all_read(user_id)

    def delete_notification(self, user_id: int, notification_id: int) -> None:
        notification = self._get_owned(user_id, notification_id)
        self.repo.delete(notification)
