"""Notifications router (inbox and preferences)."""
from fastapi import APIRouter, Query

from app.api.dependencies import CurrentUser, DbSession
from app.core.config import settings
from app.services.inbox_service import InboxService
from app.services.preference_service import PreferenceService
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationPreferences,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    db: DbSession,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    unread_only: bool = Query(False),
):
    """Get the caller's notifications with unread count."""
    service = InboxService(db)
    return service.list_notifications(current_user.id, page=page, limit=limit, unread_only=unread_only)


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    db: DbSession,
    current_user: CurrentUser,
):
    """Get unread notification count, used for the polling badge."""
    service = InboxService(db)
    return UnreadCountResponse(count=service.get_unread_count(current_user.id))


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_read(
    db: DbSession,
    current_user: CurrentUser,
):
    """Mark all of the caller's notifications as read."""
    service = InboxService(db)
    return MarkAllReadResponse(updated=service.mark_all_read(current_user.id))


@router.get("/preferences", response_model=NotificationPreferences, response_model_by_alias=True)
def get_preferences(
    db: DbSession,
    current_user: CurrentUser,
):
    """Get the caller's notification preferences (defaults when never set)."""
    return PreferenceService(db).get_preferences(current_user.id)


@router.put("/preferences", response_model=NotificationPreferences, response_model_by_alias=True)
def update_preferences(
    preferences: NotificationPreferences,
    db: DbSession,
    current_user: CurrentUser,
):
    """Replace the caller's notification preferences."""
    return PreferenceService(db).update_preferences(current_user.id, preferences)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    db: DbSession,
    current_user: CurrentUser,
):
    """Mark a single notification as read."""
    service = InboxService(db)
    return service.mark_read(current_user.id, notification_id)


@router.delete("/{notification_id}", response_model=dict)
def delete_notification(
    notification_id: int,
    db: DbSession,
    current_user: CurrentUser,
):
    """Delete one of the caller's notifications."""
    service = InboxService(db)
    service.delete_notification(current_user.id, notification_id)
    return {"message": "Notification deleted"}
