"""API dependencies for authentication."""
from typing import Annotated, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import UnauthenticatedError
from app.core.security import decode_access_token
from app.models.user import User
from app.repositories.user_repository import UserRepository

# Security scheme; missing credentials are reported by get_current_user
security = HTTPBearer(auto_error=False)


def _resolve_user(token: str, db: Session) -> User:
    payload = decode_access_token(token)

    user_id = payload.get("sub")
    if user_id is None:
        raise UnauthenticatedError("Could not validate credentials")

    try:
        user = UserRepository(db).get_by_id(int(user_id))
    except (TypeError, ValueError):
        raise UnauthenticatedError("Could not validate credentials")

    if user is None:
        raise UnauthenticatedError("User not found")

    return user


def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[Session, Depends(get_db)]
) -> User:
    """
    Dependency to get current authenticated user.

    Extracts JWT from Bearer token, validates it, and retrieves user.

    Raises:
        UnauthenticatedError: If the token is missing or invalid, or the user is gone
    """
    if credentials is None:
        raise UnauthenticatedError()
    return _resolve_user(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[Session, Depends(get_db)]
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None. Bad tokens still fail."""
    if credentials is None:
        return None
    return _resolve_user(credentials.credentials, db)


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
DbSession = Annotated[Session, Depends(get_db)]
