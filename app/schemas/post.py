"""Post, comment and feed schemas."""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Union
from datetime import datetime

from app.models.post import PostStatus
from app.schemas.group import GroupMini
from app.schemas.user import UserMini


class FeedSort(str, Enum):
    NEW = "new"
    TOP = "top"
    TRENDING = "trending"


class SearchScope(str, Enum):
    POSTS = "posts"
    USERS = "users"
    GROUPS = "groups"


class PostCreate(BaseModel):
    """Create post."""
    title: Optional[str] = Field(None, max_length=200)
    content: str = Field(..., min_length=1, max_length=10000)
    group_id: Optional[int] = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content is required")
        return v.strip()

    @field_validator("title")
    @classmethod
    def blank_title_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class PostModeration(BaseModel):
    approved: bool


class PostResponse(BaseModel):
    id: int
    author_id: int
    author: UserMini
    group_id: Optional[int] = None
    group: Optional[GroupMini] = None
    title: Optional[str] = None
    content: str
    status: PostStatus
    reaction_count: int
    comment_count: int
    view_count: int
    published_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeedPagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_more: bool
    next_cursor: Optional[int] = None


class FeedResponse(BaseModel):
    posts: List[PostResponse]
    pagination: FeedPagination


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    parent_id: Optional[int] = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content is required")
        return v.strip()


class CommentResponse(BaseModel):
    id: int
    post_id: int
    author_id: int
    author: UserMini
    parent_id: Optional[int] = None
    content: str
    reaction_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentListResponse(BaseModel):
    comments: List[CommentResponse]
    total: int


class SearchResponse(BaseModel):
    results: List[Union[PostResponse, GroupMini, UserMini]]
    query: str
    scope: SearchScope
    page: int
    limit: int
