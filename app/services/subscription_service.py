"""Subscription registry service."""
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.models.reaction import TargetType
from app.models.subscription import Subscription
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.subscription import SubscriptionCreate


class SubscriptionService:
    """Subscription business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SubscriptionRepository(db)

    def subscribe(self, user_id: int, data: SubscriptionCreate) -> Subscription:
        """
        Upsert the subscription for (user, target); flags are replaced, not merged.

        Raises:
            ConflictError: If a concurrent subscribe inserted the same row first
        """
        try:
            return self.repo.upsert(
                user_id=user_id,
                target_type=data.target_type,
                target_id=data.target_id,
                in_app=data.in_app,
                email=data.email,
                push=data.push,
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Subscription was created concurrently, please retry")

    def unsubscribe(self, user_id: int, target_type: TargetType, target_id: int) -> None:
        """
        Raises:
            NotFoundError: If there is no such subscription
        """
        if not self.repo.delete(user_id, target_type, target_id):
            raise NotFoundError("Subscription not found")

    def list_subscriptions(self, user_id: int) -> List[Subscription]:
        return self.repo.get_by_user(user_id)
