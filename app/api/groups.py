"""Groups router."""
from fastapi import APIRouter

from app.api.dependencies import CurrentUser, DbSession
from app.schemas.group import GroupCreate, GroupResponse, MembershipResponse
from app.services.group_service import GroupService

router = APIRouter(prefix="/groups", tags=["Groups"])


@router.post("", response_model=GroupResponse, status_code=201)
def create_group(
    payload: GroupCreate,
    db: DbSession,
    current_user: CurrentUser,
):
    """Create a group; the caller becomes its owner."""
    return GroupService(db).create_group(payload, current_user.id)


@router.get("/{slug}", response_model=GroupResponse)
def get_group(slug: str, db: DbSession):
    """Get a group by slug."""
    return GroupService(db).get_group(slug)


@router.post("/{slug}/join", response_model=MembershipResponse, status_code=201)
def join_group(
    slug: str,
    db: DbSession,
    current_user: CurrentUser,
):
    """Join a group (pending for non-public groups). Notifies the owner."""
    return GroupService(db).join_group(slug, current_user.id)
