"""Subscription repository."""
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.reaction import TargetType
from app.models.subscription import Subscription


class SubscriptionRepository:
    """Subscription data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int, target_type: TargetType, target_id: int) -> Optional[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.target_type == target_type,
                Subscription.target_id == target_id,
            )
            .first()
        )

    def upsert(self, user_id: int, target_type: TargetType, target_id: int,
               in_app: bool, email: bool, push: bool) -> Subscription:
        """
        Create or overwrite the channel flags for (user, target).

        Raises IntegrityError if a concurrent writer inserted the same triple.
        """
        subscription = self.get(user_id, target_type, target_id)
        if subscription is None:
            subscription = Subscription(
                user_id=user_id,
                target_type=target_type,
                target_id=target_id,
            )
            self.db.add(subscription)
        subscription.in_app = in_app
        subscription.email = email
        subscription.push = push
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def delete(self, user_id: int, target_type: TargetType, target_id: int) -> bool:
        deleted = (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.target_type == target_type,
                Subscription.target_id == target_id,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted == 1

    def get_by_user(self, user_id: int) -> List[Subscription]:
        """All subscriptions of a user, newest first."""
        return (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .all()
        )
