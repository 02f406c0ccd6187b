"""Post and comment repository."""
from datetime import datetime, timezone
from typing import Optional, List, Sequence
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_

from app.models.post import Post, Comment, PostStatus
from app.models.user import User


class PostRepository:
    """Post / comment data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, author_id: int, content: str, title: Optional[str] = None,
               group_id: Optional[int] = None,
               status: PostStatus = PostStatus.PUBLISHED) -> Post:
        """Create a new post."""
        post = Post(
            author_id=author_id,
            content=content,
            title=title,
            group_id=group_id,
            status=status,
            published_at=datetime.now(timezone.utc) if status == PostStatus.PUBLISHED else None,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def get_by_id(self, post_id: int) -> Optional[Post]:
        """Get post by ID with author and group."""
        return (
            self.db.query(Post)
            .options(joinedload(Post.author), joinedload(Post.group))
            .filter(Post.id == post_id)
            .first()
        )

    def exists(self, post_id: int) -> bool:
        return self.db.query(Post.id).filter(Post.id == post_id).first() is not None

    def set_status(self, post: Post, status: PostStatus) -> Post:
        post.status = status
        if status == PostStatus.PUBLISHED and post.published_at is None:
            post.published_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(post)
        return post

    def increment_view_count(self, post_id: int) -> None:
        self.db.query(Post).filter(Post.id == post_id).update(
            {Post.view_count: Post.view_count + 1}, synchronize_session=False
        )
        self.db.commit()

    # ------------------------------------------------------------------
    # Feed
    # ------------------------------------------------------------------

    def _feed_query(self, search: Optional[str] = None, group_id: Optional[int] = None,
                    cursor: Optional[int] = None):
        query = self.db.query(Post).filter(Post.status == PostStatus.PUBLISHED)
        if cursor is not None:
            query = query.filter(Post.id < cursor)
        if group_id is not None:
            query = query.filter(Post.group_id == group_id)
        if search:
            query = query.join(User, Post.author_id == User.id).filter(
                or_(
                    Post.title.icontains(search, autoescape=True),
                    Post.content.icontains(search, autoescape=True),
                    User.name.icontains(search, autoescape=True),
                )
            )
        return query

    def get_feed(self, order_by: Sequence, skip: int = 0, limit: int = 20,
                 search: Optional[str] = None, group_id: Optional[int] = None,
                 cursor: Optional[int] = None) -> List[Post]:
        return (
            self._feed_query(search=search, group_id=group_id, cursor=cursor)
            .options(joinedload(Post.author), joinedload(Post.group))
            .order_by(*order_by)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_feed(self, search: Optional[str] = None, group_id: Optional[int] = None,
                   cursor: Optional[int] = None) -> int:
        return self._feed_query(search=search, group_id=group_id, cursor=cursor).count()

    def search(self, q: str, skip: int = 0, limit: int = 20) -> List[Post]:
        """Title/content search over published posts, newest first."""
        return (
            self.db.query(Post)
            .options(joinedload(Post.author), joinedload(Post.group))
            .filter(
                Post.status == PostStatus.PUBLISHED,
                or_(Post.title.icontains(q, autoescape=True), Post.content.icontains(q, autoescape=True)),
            )
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def get_comment(self, comment_id: int) -> Optional[Comment]:
        return self.db.query(Comment).filter(Comment.id == comment_id).first()

    def add_comment(self, post_id: int, author_id: int, content: str,
                    parent_id: Optional[int] = None) -> Comment:
        """Stage a comment and bump the post's comment_count. Caller commits."""
        comment = Comment(
            post_id=post_id,
            author_id=author_id,
            content=content,
            parent_id=parent_id,
        )
        self.db.add(comment)
        self.db.query(Post).filter(Post.id == post_id).update(
            {Post.comment_count: Post.comment_count + 1}, synchronize_session=False
        )
        self.db.flush()
        return comment

    def get_comments(self, post_id: int, skip: int = 0, limit: int = 20) -> List[Comment]:
        """Top-level published comments, oldest first."""
        return (
            self.db.query(Comment)
            .options(joinedload(Comment.author))
            .filter(
                Comment.post_id == post_id,
                Comment.status == PostStatus.PUBLISHED,
                Comment.parent_id == None,  # noqa: E711
            )
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_comments(self, post_id: int) -> int:
        return (
            self.db.query(Comment)
            .filter(
                Comment.post_id == post_id,
                Comment.status == PostStatus.PUBLISHED,
                Comment.parent_id == None,  # noqa: E711
            )
            .count()
        )
