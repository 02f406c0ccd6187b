"""Subscription model."""
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.models.reaction import TargetType


class Subscription(Base):
    """
    Delivery-channel preferences of a user for one target.

    The target is not checked for existence; ids are taken as supplied.
    """

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    target_type = Column(
        SQLEnum(TargetType, values_callable=lambda x: [e.value for e in x], name="target_type"),
        nullable=False,
    )
    target_id = Column(Integer, nullable=False)
    in_app = Column(Boolean, default=True, nullable=False)
    email = Column(Boolean, default=False, nullable=False)
    push = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_subscriptions_user_target"),
    )

    user = relationship("User", back_populates="subscriptions")
