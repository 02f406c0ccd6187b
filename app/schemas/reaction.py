"""Reaction schemas."""
from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.models.reaction import TargetType


class PostReactionCreate(BaseModel):
    """Reaction body on the post route; the target comes from the path."""
    type: str = Field("like", min_length=1, max_length=20)


class ReactionCreate(PostReactionCreate):
    """Reaction on any target."""
    target_type: TargetType
    target_id: int


class ReactionResponse(BaseModel):
    id: int
    target_type: TargetType
    target_id: int
    user_id: int
    type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReactionToggleResponse(BaseModel):
    action: Literal["added", "removed"]
    reaction: Optional[ReactionResponse] = None


class ReactionCountResponse(BaseModel):
    target_type: TargetType
    target_id: int
    reaction_count: int
