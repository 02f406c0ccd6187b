"""Subscription schemas."""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from app.models.reaction import TargetType


class SubscriptionCreate(BaseModel):
    """Subscribe request. Re-sending replaces all three flags."""
    target_type: TargetType
    target_id: int
    in_app: bool = True
    email: bool = False
    push: bool = False


class SubscriptionResponse(BaseModel):
    id: int
    user_id: int
    target_type: TargetType
    target_id: int
    in_app: bool
    email: bool
    push: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionListResponse(BaseModel):
    subscriptions: List[SubscriptionResponse]
