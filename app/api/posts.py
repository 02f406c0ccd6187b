"""Posts router: feed, posts, comments and post reactions."""
from typing import Optional
from fastapi import APIRouter, Query, Request

from app.api.dependencies import CurrentUser, DbSession, OptionalUser
from app.core.config import settings
from app.core.limiter import limiter
from app.models.reaction import TargetType
from app.schemas.post import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    FeedResponse,
    FeedSort,
    PostCreate,
    PostModeration,
    PostResponse,
    SearchResponse,
    SearchScope,
)
from app.schemas.reaction import PostReactionCreate, ReactionToggleResponse
from app.services.feed_service import FeedService
from app.services.post_service import PostService
from app.services.reaction_service import ReactionService

router = APIRouter(tags=["Posts"])


@router.get("/posts", response_model=FeedResponse)
def list_feed(
    db: DbSession,
    current_user: OptionalUser,
    sort: FeedSort = Query(FeedSort.NEW),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    cursor: Optional[int] = Query(None, ge=1, description="Keyset cursor; when set, page is ignored"),
    search: Optional[str] = Query(None, max_length=255),
    group_id: Optional[int] = None,
):
    """
    List published posts.

    Offset pagination by default; pass ``cursor`` (the last id seen) for
    keyset pagination.
    """
    service = FeedService(db)
    return service.list_feed(
        sort=sort, page=page, limit=limit, cursor=cursor, search=search, group_id=group_id
    )


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    payload: PostCreate,
    db: DbSession,
    current_user: CurrentUser,
):
    """Create a post; group posts require active membership."""
    return PostService(db).create_post(payload, current_user.id)


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    db: DbSession,
    current_user: OptionalUser,
):
    """Get a single post (counts a view)."""
    return PostService(db).get_post(post_id)


@router.patch("/posts/{post_id}/moderation", response_model=PostResponse)
def moderate_post(
    post_id: int,
    payload: PostModeration,
    db: DbSession,
    current_user: CurrentUser,
):
    """Approve or reject a pending group post (group owner / moderator)."""
    return PostService(db).moderate_post(post_id, payload.approved, current_user.id)


@router.post("/posts/{post_id}/reactions", response_model=ReactionToggleResponse)
@limiter.limit(settings.REACTION_RATE_LIMIT)
def toggle_post_reaction(
    request: Request,
    post_id: int,
    db: DbSession,
    current_user: CurrentUser,
    payload: Optional[PostReactionCreate] = None,
):
    """Like / unlike a post."""
    kind = payload.type if payload else "like"
    service = ReactionService(db)
    return service.toggle_reaction(TargetType.POST, post_id, current_user.id, kind, verify_target=True)


@router.delete("/posts/{post_id}/reactions", response_model=dict)
def remove_post_reaction(
    post_id: int,
    db: DbSession,
    current_user: CurrentUser,
):
    """Remove the caller's reaction from a post."""
    ReactionService(db).remove_reaction(TargetType.POST, post_id, current_user.id)
    return {"message": "Reaction removed"}


@router.get("/posts/{post_id}/comments", response_model=CommentListResponse)
def list_comments(
    post_id: int,
    db: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
):
    """Top-level comments of a post, oldest first."""
    return PostService(db).get_comments(post_id, page=page, limit=limit)


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=201)
def create_comment(
    post_id: int,
    payload: CommentCreate,
    db: DbSession,
    current_user: CurrentUser,
):
    """Comment on a post; notifies the post author."""
    return PostService(db).create_comment(post_id, payload, current_user.id)


@router.get("/search", response_model=SearchResponse)
def search(
    db: DbSession,
    q: Optional[str] = Query(None, max_length=255),
    scope: SearchScope = Query(SearchScope.POSTS),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
):
    """Search posts, users or groups."""
    return FeedService(db).search(q, scope=scope, page=page, limit=limit)
