"""Post and comment models."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum

from app.core.database import Base


class PostStatus(str, Enum):
    """
    Publication state.

    Flow:
      author posts into a group that requires approval  →  pending
      group owner / moderator approves                   →  published
      group owner / moderator rejects                    →  rejected
    Posts outside such groups are published immediately.
    """
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


class Post(Base):
    """
    Post model.

    reaction_count, comment_count and view_count are denormalized counters;
    they are only ever changed with atomic UPDATE statements.
    """

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String(200), nullable=True)
    content = Column(Text, nullable=False)
    status = Column(
        SQLEnum(PostStatus, values_callable=lambda x: [e.value for e in x], name="post_status"),
        default=PostStatus.PUBLISHED,
        nullable=False,
        index=True,
    )
    reaction_count = Column(Integer, default=0, server_default="0", nullable=False, index=True)
    comment_count = Column(Integer, default=0, server_default="0", nullable=False)
    view_count = Column(Integer, default=0, server_default="0", nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    author = relationship("User", back_populates="posts")
    group = relationship("Group", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Post(id={self.id}, author_id={self.author_id}, status={self.status})>"


class Comment(Base):
    """Comment on a post; parent_id threads replies within the same post."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    content = Column(Text, nullable=False)
    status = Column(
        SQLEnum(PostStatus, values_callable=lambda x: [e.value for e in x], name="post_status"),
        default=PostStatus.PUBLISHED,
        nullable=False,
    )
    reaction_count = Column(Integer, default=0, server_default="0", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    post = relationship("Post", back_populates="comments")
    author = relationship("User")

    def __repr__(self):
        return f"<Comment(id={self.id}, post_id={self.post_id})>"
