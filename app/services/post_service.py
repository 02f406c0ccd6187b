"""Post and comment service."""
import logging

from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from app.models.post import Comment, Post, PostStatus
from app.models.reaction import TargetType
from app.repositories.group_repository import GroupRepository
from app.repositories.post_repository import PostRepository
from app.schemas.post import CommentCreate, PostCreate
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class PostService:
    """Post business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.post_repo = PostRepository(db)
        self.group_repo = GroupRepository(db)
        self.notifier = NotificationService(db)

    def create_post(self, data: PostCreate, author_id: int) -> Post:
        """
        Create a post, optionally inside a group.

        Validates:
        - Author is an active member of the group (if any)

        Posts into groups that require approval start as pending and do not
        fan out until approved.

        Raises:
            NotFoundError: If the group does not exist
            ForbiddenError: If the author is not an active member
        """
        status = PostStatus.PUBLISHED
        if data.group_id is not None:
            group = self.group_repo.get_by_id(data.group_id)
            if not group:
                raise NotFoundError("Group not found")
            membership = self.group_repo.get_membership(data.group_id, author_id)
            if not membership or not membership.is_active:
                raise ForbiddenError("Not a member of this group")
            if group.post_approval_required and not membership.can_moderate:
                status = PostStatus.PENDING

        post = self.post_repo.create(
            author_id=author_id,
            content=data.content,
            title=data.title,
            group_id=data.group_id,
            status=status,
        )
        if post.status == PostStatus.PUBLISHED:
            self._announce(post)
        return post

    def _announce(self, post: Post) -> None:
        if post.group_id is not None:
            member_ids = self.group_repo.get_active_member_ids(post.group_id, exclude_user_id=post.author_id)
            if member_ids:
                self.notifier.group_post_created(post, member_ids)
        self.notifier.mentions_in(post.author_id, post.content, TargetType.POST, post.id)

    def get_post(self, post_id: int) -> Post:
        """
        Get a post and count the view.

        Raises:
            NotFoundError: If post not found
        """
        if not self.post_repo.exists(post_id):
            raise NotFoundError("Post not found")
        self.post_repo.increment_view_count(post_id)
        return self.post_repo.get_by_id(post_id)

    def moderate_post(self, post_id: int, approved: bool, moderator_id: int) -> Post:
        """
        Approve or reject a pending post.

        Raises:
            NotFoundError: If post not found
            ForbiddenError: If the caller cannot moderate the post's group
            InvalidInputError: If the post is not pending
        """
        post = self.post_repo.get_by_id(post_id)
        if not post:
            raise NotFoundError("Post not found")
        if post.group_id is None:
            raise ForbiddenError("Only group posts can be moderated")
        membership = self.group_repo.get_membership(post.group_id, moderator_id)
        if not membership or not membership.can_moderate:
            raise ForbiddenError("Not a moderator of this group")
        if post.status != PostStatus.PENDING:
            raise InvalidInputError("Post is not awaiting moderation")

        post = self.post_repo.set_status(post, PostStatus.PUBLISHED if approved else PostStatus.REJECTED)
        logger.info("Post %s %s by user %s", post.id, "approved" if approved else "rejected", moderator_id)

        self.notifier.post_approval(post.author_id, post.id, approved, moderator_id=moderator_id)
        if approved:
            self._announce(post)
        return post

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def create_comment(self, post_id: int, data: CommentCreate, author_id: int) -> Comment:
        """
        Create a comment and bump the post's comment_count in one transaction.

        Raises:
            NotFoundError: If post not found
            InvalidInputError: If parent_id is not a comment on the same post
        """
        post = self.post_repo.get_by_id(post_id)
        if not post:
            raise NotFoundError("Post not found")

        if data.parent_id is not None:
            parent = self.post_repo.get_comment(data.parent_id)
            if not parent or parent.post_id != post_id:
                raise InvalidInputError(
                    "Invalid parent comment",
                    errors=[{"field": "parent_id", "message": "must be a comment on this post"}],
                )

        try:
            comment = self.post_repo.add_comment(
                post_id=post_id,
                author_id=author_id,
                content=data.content,
                parent_id=data.parent_id,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(comment)

        self.notifier.reply(post.author_id, author_id, post_id, comment.id, comment.content)
        self.notifier.mentions_in(author_id, comment.content, TargetType.COMMENT, comment.id, post_id=post_id)
        return comment

    def get_comments(self, post_id: int, page: int = 1, limit: int = 20) -> dict:
        if not self.post_repo.exists(post_id):
            raise NotFoundError("Post not found")
        skip = (page - 1) * limit
        return {
            "comments": self.post_repo.get_comments(post_id, skip=skip, limit=limit),
            "total": self.post_repo.count_comments(post_id),
        }
