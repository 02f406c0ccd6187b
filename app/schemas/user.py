"""User schemas."""
from pydantic import BaseModel, ConfigDict
from typing import Optional


class UserMini(BaseModel):
    """Public user info embedded in posts, comments and search results."""
    id: int
    name: Optional[str] = None
    handle: str
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
