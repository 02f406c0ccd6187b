"""Group models."""
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum

from app.core.database import Base


class GroupVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    RESTRICTED = "restricted"


class MemberRole(str, Enum):
    OWNER = "owner"
    MODERATOR = "moderator"
    MEMBER = "member"


class MemberStatus(str, Enum):
    """Public groups admit immediately; others hold the request as pending."""
    ACTIVE = "active"
    PENDING = "pending"


class Group(Base):
    """Community group that posts can be published into."""

    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(50), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    visibility = Column(
        SQLEnum(GroupVisibility, values_callable=lambda x: [e.value for e in x], name="group_visibility"),
        default=GroupVisibility.PUBLIC,
        nullable=False,
    )
    post_approval_required = Column(Boolean, default=False, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    owner = relationship("User", foreign_keys=[owner_id])
    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    posts = relationship("Post", back_populates="group")

    def __repr__(self):
        return f"<Group(id={self.id}, slug={self.slug})>"


class GroupMember(Base):
    """Membership of a user in a group, unique per (group, user)."""

    __tablename__ = "group_members"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(
        SQLEnum(MemberRole, values_callable=lambda x: [e.value for e in x], name="member_role"),
        default=MemberRole.MEMBER,
        nullable=False,
    )
    status = Column(
        SQLEnum(MemberStatus, values_callable=lambda x: [e.value for e in x], name="member_status"),
        default=MemberStatus.ACTIVE,
        nullable=False,
    )
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )

    # Relationships
    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="memberships")

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    @property
    def can_moderate(self) -> bool:
        return self.is_active and self.role in (MemberRole.OWNER, MemberRole.MODERATOR)
