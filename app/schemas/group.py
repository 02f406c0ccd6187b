"""Group schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.models.group import GroupVisibility, MemberRole, MemberStatus


class GroupCreate(BaseModel):
    """Create group."""
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=500)
    visibility: GroupVisibility = GroupVisibility.PUBLIC
    post_approval_required: bool = False


class GroupMini(BaseModel):
    """Minimal group info embedded in posts."""
    id: int
    name: str
    slug: str
    model_config = ConfigDict(from_attributes=True)


class GroupResponse(GroupMini):
    description: Optional[str] = None
    visibility: GroupVisibility
    post_approval_required: bool
    owner_id: int
    created_at: datetime


class MembershipResponse(BaseModel):
    id: int
    group_id: int
    user_id: int
    role: MemberRole
    status: MemberStatus
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)
