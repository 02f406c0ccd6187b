"""User repository."""
from typing import Iterable, Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import or_, func

from app.models.user import User


class UserRepository:
    """User data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, email: str, handle: str, name: Optional[str] = None,
               image: Optional[str] = None, bio: Optional[str] = None) -> User:
        """Create a new user."""
        user = User(email=email, handle=handle, name=name, image=image, bio=bio)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_handles(self, handles: Iterable[str]) -> List[User]:
        """Resolve @handles case-insensitively."""
        lowered = {h.lower() for h in handles}
        if not lowered:
            return []
        return self.db.query(User).filter(func.lower(User.handle).in_(lowered)).all()

    def search(self, q: str, skip: int = 0, limit: int = 20) -> List[User]:
        """Match name or handle."""
        return (
            self.db.query(User)
            .filter(or_(User.name.icontains(q, autoescape=True), User.handle.icontains(q, autoescape=True)))
            .order_by(User.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_notification_settings(self, user_id: int) -> Optional[dict]:
        return (
            self.db.query(User.notification_settings)
            .filter(User.id == user_id)
            .scalar()
        )

    def set_notification_settings(self, user_id: int, settings: dict) -> bool:
        """Replace the stored settings wholesale."""
        updated = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update({User.notification_settings: settings}, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1
