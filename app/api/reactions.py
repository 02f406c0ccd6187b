"""Reactions router (generic post/comment targets)."""
from fastapi import APIRouter, Request, Response, status

from app.api.dependencies import CurrentUser, DbSession
from app.core.config import settings
from app.core.limiter import limiter
from app.models.reaction import TargetType
from app.schemas.reaction import ReactionCreate, ReactionCountResponse, ReactionToggleResponse
from app.services.reaction_service import ReactionService

router = APIRouter(prefix="/reactions", tags=["Reactions"])


@router.post("", response_model=ReactionToggleResponse)
@limiter.limit(settings.REACTION_RATE_LIMIT)
def toggle_reaction(
    request: Request,
    response: Response,
    payload: ReactionCreate,
    db: DbSession,
    current_user: CurrentUser,
):
    """
    Toggle the caller's reaction on a post or comment.

    201 when a reaction was added, 200 when an existing one was removed.
    """
    service = ReactionService(db)
    result = service.toggle_reaction(payload.target_type, payload.target_id, current_user.id, payload.type)
    response.status_code = status.HTTP_201_CREATED if result["action"] == "added" else status.HTTP_200_OK
    return result


@router.delete("/{target_type}/{target_id}", response_model=dict)
def remove_reaction(
    target_type: TargetType,
    target_id: int,
    db: DbSession,
    current_user: CurrentUser,
):
    """Remove the caller's reaction from a target."""
    ReactionService(db).remove_reaction(target_type, target_id, current_user.id)
    return {"message": "Reaction removed"}


@router.post("/{target_type}/{target_id}/recount", response_model=ReactionCountResponse)
def recount_reactions(
    target_type: TargetType,
    target_id: int,
    db: DbSession,
    current_user: CurrentUser,
):
    """Rebuild a target's reaction_count from the ledger."""
    count = ReactionService(db).recount(target_type, target_id)
    return ReactionCountResponse(target_type=target_type, target_id=target_id, reaction_count=count)
