"""Feed assembly and search."""
import math
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import InvalidInputError
from app.models.post import Post
from app.repositories.group_repository import GroupRepository
from app.repositories.post_repository import PostRepository
from app.repositories.user_repository import UserRepository
from app.schemas.group import GroupMini
from app.schemas.post import FeedSort, PostResponse, SearchScope
from app.schemas.user import UserMini

# ORDER BY per sort mode. id is the last key so pages are stable.
SORT_ORDERS = {
    FeedSort.NEW: (Post.created_at.desc(), Post.id.desc()),
    FeedSort.TOP: (Post.reaction_count.desc(), Post.id.desc()),
    FeedSort.TRENDING: (Post.reaction_count.desc(), Post.created_at.desc(), Post.id.desc()),
}


class FeedService:
    """Orders and paginates published posts."""

    def __init__(self, db: Session):
        self.db = db
        self.post_repo = PostRepository(db)
        self.user_repo = UserRepository(db)
        self.group_repo = GroupRepository(db)

    def list_feed(self, sort: FeedSort = FeedSort.NEW, page: int = 1, limit: int = 20,
                  cursor: Optional[int] = None, search: Optional[str] = None,
                  group_id: Optional[int] = None) -> dict:
        """
        One page of the feed.

        Pagination mode is chosen by the presence of ``cursor``:
          - no cursor: offset pagination, ``skip = (page - 1) * limit``
          - cursor:    keyset pagination on ``id < cursor``; ``page`` is ignored
        """
        search = search.strip() if search else None
        skip = 0 if cursor is not None else (page - 1) * limit
        filters = {"search": search or None, "group_id": group_id, "cursor": cursor}

        posts = self.post_repo.get_feed(SORT_ORDERS[sort], skip=skip, limit=limit, **filters)
        total = self.post_repo.count_feed(**filters)
        has_more = skip + limit < total

        return {
            "posts": posts,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
                "has_more": has_more,
                "next_cursor": posts[-1].id if has_more and posts else None,
            },
        }

    def search(self, q: Optional[str], scope: SearchScope = SearchScope.POSTS,
               page: int = 1, limit: int = 20) -> dict:
        """
        Search posts, users or groups.

        Raises:
            InvalidInputError: If the query is empty
        """
        if not q or not q.strip():
            raise InvalidInputError("Search query is required", errors=[{"field": "q", "message": "required"}])
        q = q.strip()
        skip = (page - 1) * limit

        if scope == SearchScope.POSTS:
            results = [PostResponse.model_validate(p) for p in self.post_repo.search(q, skip=skip, limit=limit)]
        elif scope == SearchScope.USERS:
            results = [UserMini.model_validate(u) for u in self.user_repo.search(q, skip=skip, limit=limit)]
        else:
            results = [GroupMini.model_validate(g) for g in self.group_repo.search(q, skip=skip, limit=limit)]

        return {
            "results": results,
            "query": q,
            "scope": scope,
            "page": page,
            "limit": limit,
        }
