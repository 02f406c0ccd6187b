"""Reaction ledger model."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Index, Enum as SQLEnum
from sqlalchemy.sql import func
from enum import Enum

from app.core.database import Base


class TargetType(str, Enum):
    """Entities that can be reacted to or subscribed to."""
    POST = "post"
    COMMENT = "comment"


class Reaction(Base):
    """
    One user's reaction to one target.

    At most one row per (target_type, target_id, user_id); a second reaction
    from the same user removes the row instead of updating it.
    """

    __tablename__ = "reactions"

    id = Column(Integer, primary_key=True, index=True)
    target_type = Column(
        SQLEnum(TargetType, values_callable=lambda x: [e.value for e in x], name="target_type"),
        nullable=False,
    )
    target_id = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), default="like", nullable=False)  # 'like', 'love', 'laugh', ...
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("target_type", "target_id", "user_id", name="uq_reactions_target_user"),
        Index("idx_reactions_target", "target_type", "target_id"),
    )

    def __repr__(self):
        return (
            f"<Reaction(target={self.target_type}:{self.target_id}, "
            f"user_id={self.user_id}, type='{self.type}')>"
        )
