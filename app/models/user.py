"""User model."""
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class User(Base):
    """Community member. Credentials live with the identity service."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    handle = Column(String(50), unique=True, index=True, nullable=False)
    image = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    notification_settings = Column(JSON, nullable=True)  # None = defaults
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")
    memberships = relationship("GroupMember", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    subscriptions = relationship("Subscription", back_populates="user", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        """Name shown to other members; falls back to the handle."""
        return self.name or self.handle

    def __repr__(self):
        return f"<User(id={self.id}, handle={self.handle})>"
