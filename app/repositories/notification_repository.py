"""Notification repository."""
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationStatus, NotificationType


def _metadata(data: Optional[dict], action_url: Optional[str]) -> dict:
    meta = {"data": data or {}}
    if action_url:
        meta["actionUrl"] = action_url
    return meta


class NotificationRepository:
    """Notification data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict] = None,
        action_url: Optional[str] = None,
    ) -> Notification:
        """Create a scheduled, unread notification."""
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            meta=_metadata(data, action_url),
            status=NotificationStatus.SCHEDULED,
            scheduled_for=datetime.now(timezone.utc),
            read_at=None,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def create_many(
        self,
        user_ids: Iterable[int],
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict] = None,
        action_url: Optional[str] = None,
    ) -> int:
        """Insert one notification per recipient in a single commit."""
        now = datetime.now(timezone.utc)
        notifications = [
            Notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                meta=_metadata(data, action_url),
                status=NotificationStatus.SCHEDULED,
                scheduled_for=now,
                read_at=None,
            )
            for user_id in user_ids
        ]
        self.db.add_all(notifications)
        self.db.commit()
        return len(notifications)

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        return self.db.query(Notification).filter(Notification.id == notification_id).first()

    def get_by_user(self, user_id: int, skip: int = 0, limit: int = 20,
                    unread_only: bool = False) -> List[Notification]:
        """Get a user's notifications, newest first."""
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.read_at == None)  # noqa: E711
        return (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_user(self, user_id: int, unread_only: bool = False) -> int:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.read_at == None)  # noqa: E711
        return query.count()

    def get_unread_count(self, user_id: int) -> int:
        """Count unread notifications for a user."""
        return self.count_by_user(user_id, unread_only=True)

    def mark_read(self, notification: Notification) -> Notification:
        """Mark a single notification as read. A second read keeps the first read_at."""
        if notification.read_at is None:
            notification.read_at = datetime.now(timezone.utc)
            notification.status = NotificationStatus.DELIVERED
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: int) -> int:
        """Mark all of a user's unread notifications as read. Returns number updated."""
        count = (
            self.db.query(Notification)
            .filter(
                Notification.user_id == user_id,
                Notification.read_at == None,  # noqa: E711
            )
            .update(
                {
                    Notification.read_at: datetime.now(timezone.utc),
                    Notification.status: NotificationStatus.DELIVERED,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return count

    def delete(self, notification: Notification) -> None:
        """Delete a notification."""
        self.db.delete(notification)
        self.db.commit()
