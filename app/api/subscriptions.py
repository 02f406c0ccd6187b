"""Subscriptions router."""
from fastapi import APIRouter

from app.api.dependencies import CurrentUser, DbSession
from app.models.reaction import TargetType
from app.schemas.subscription import SubscriptionCreate, SubscriptionListResponse, SubscriptionResponse
from app.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("", response_model=SubscriptionResponse, status_code=201)
def subscribe(
    payload: SubscriptionCreate,
    db: DbSession,
    current_user: CurrentUser,
):
    """Subscribe to a post or comment, replacing any existing channel flags."""
    return SubscriptionService(db).subscribe(current_user.id, payload)


@router.get("", response_model=SubscriptionListResponse)
def list_subscriptions(
    db: DbSession,
    current_user: CurrentUser,
):
    """List the caller's subscriptions, newest first."""
    return SubscriptionListResponse(
        subscriptions=SubscriptionService(db).list_subscriptions(current_user.id)
    )


@router.delete("/{target_type}/{target_id}", response_model=dict)
def unsubscribe(
    target_type: TargetType,
    target_id: int,
    db: DbSession,
    current_user: CurrentUser,
):
    """Remove a subscription."""
    SubscriptionService(db).unsubscribe(current_user.id, target_type, target_id)
    return {"message": "Unsubscribed successfully"}
