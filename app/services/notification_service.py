"""Notification dispatcher.

Builds notifications from semantic events and persists them. Delivery is
best-effort relative to whatever action triggered it: every public method
here logs and swallows its own failures, so callers invoke it after their
primary mutation has been committed and never wrap it themselves.
"""
import functools
import logging
import re
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import DispatchFailure
from app.core.ops_metrics import observe_dispatch
from app.models.group import Group, MemberStatus
from app.models.notification import Notification, NotificationType
from app.models.post import Post
from app.models.reaction import Reaction, TargetType
from app.models.user import User
from app.repositories.notification_repository import NotificationRepository
from app.repositories.post_repository import PostRepository
from app.repositories.reaction_repository import ReactionRepository
from app.repositories.user_repository import UserRepository
from app.schemas.notification import NotificationEvent

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"(?<![\w@])@([A-Za-z0-9_]{1,50})")


def truncate_preview(content: str, limit: Optional[int] = None) -> str:
    """First ``limit`` characters of content, with "..." appended when cut."""
    limit = settings.NOTIFICATION_PREVIEW_LENGTH if limit is None else limit
    if len(content) > limit:
        return content[:limit] + "..."
    return content


def extract_mentions(content: str) -> List[str]:
    """Unique @handles in order of first appearance."""
    seen = {}
    for handle in MENTION_PATTERN.findall(content or ""):
        seen.setdefault(handle.lower(), handle)
    return list(seen.values())


def target_link(target_type: TargetType, target_id: int, post_id: Optional[int] = None) -> str:
    if target_type == TargetType.POST:
        return f"/posts/{target_id}"
    return f"/posts/{post_id if post_id is not None else target_id}#comment-{target_id}"


def best_effort(default=None):
    """Run a dispatcher method, turning any failure into a logged no-op."""
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                return method(self, *args, **kwargs)
            except Exception:
                self.db.rollback()
                observe_dispatch(failed=1)
                logger.exception("Notification dispatch failed in %s", method.__name__)
                return default
        return wrapper
    return decorator


class NotificationService:
    """Notification dispatcher: single and bulk creation plus event builders."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository(db)
        self.user_repo = UserRepository(db)
        self.post_repo = PostRepository(db)
        self.reaction_repo = ReactionRepository(db)

    # ------------------------------------------------------------------
    # Core creation
    # ------------------------------------------------------------------

    @best_effort()
    def notify(self, user_id: int, event: NotificationEvent) -> Optional[Notification]:
        """Persist one notification. Returns None when suppressed or on failure."""
        if event.actor_id is not None and event.actor_id == user_id:
            observe_dispatch(suppressed=1)
            return None
        try:
            notification = self.repo.create(
                user_id=user_id,
                type=event.type,
                title=event.title,
                message=event.message,
                data=event.data,
                action_url=event.action_url,
            )
        except SQLAlchemyError as exc:
            raise DispatchFailure(f"could not store {event.type.value} notification for user {user_id}") from exc
        observe_dispatch(created=1)
        logger.debug("Created %s notification %s for user %s", event.type.value, notification.id, user_id)
        return notification

    @best_effort(default=0)
    def notify_many(self, user_ids: Iterable[int], event: NotificationEvent) -> int:
        """Persist the same event for many recipients in one batch; all or nothing."""
        unique_ids = list(dict.fromkeys(user_ids))
        recipients = [uid for uid in unique_ids if uid != event.actor_id]
        if len(recipients) < len(unique_ids):
            observe_dispatch(suppressed=len(unique_ids) - len(recipients))
        if not recipients:
            return 0
        try:
            created = self.repo.create_many(
                recipients,
                type=event.type,
                title=event.title,
                message=event.message,
                data=event.data,
                action_url=event.action_url,
            )
        except SQLAlchemyError as exc:
            raise DispatchFailure(
                f"could not store {event.type.value} batch for {len(recipients)} recipients"
            ) from exc
        observe_dispatch(created=created)
        return created

    # ------------------------------------------------------------------
    # Event builders, called from other services to emit notifications
    # ------------------------------------------------------------------

    def _actor(self, actor_id: int) -> Optional[User]:
        actor = self.user_repo.get_by_id(actor_id)
        if actor is None:
            logger.info("Skipping notification: actor %s not found", actor_id)
        return actor

    @best_effort()
    def mention(self, mentioned_user_id: int, mentioner_id: int, target_type: TargetType,
                target_id: int, content: str, post_id: Optional[int] = None) -> Optional[Notification]:
        mentioner = self._actor(mentioner_id)
        if mentioner is None:
            return None
        where = "a post" if target_type == TargetType.POST else "a comment"
        return self.notify(mentioned_user_id, NotificationEvent(
            type=NotificationType.MENTION,
            title="You were mentioned",
            message=f"{mentioner.display_name} mentioned you in {where}",
            data={
                "mentioner_id": mentioner_id,
                "target_type": target_type.value,
                "target_id": target_id,
                "content": truncate_preview(content),
            },
            action_url=target_link(target_type, target_id, post_id),
            actor_id=mentioner_id,
        ))

    @best_effort()
    def reply(self, original_author_id: int, replier_id: int, post_id: int,
              comment_id: int, content: str) -> Optional[Notification]:
        replier = self._actor(replier_id)
        if replier is None:
            return None
        return self.notify(original_author_id, NotificationEvent(
            type=NotificationType.REPLY,
            title="New reply",
            message=f"{replier.display_name} replied to your post",
            data={
                "replier_id": replier_id,
                "post_id": post_id,
                "comment_id": comment_id,
                "content": truncate_preview(content),
            },
            action_url=target_link(TargetType.COMMENT, comment_id, post_id),
            actor_id=replier_id,
        ))

    @best_effort()
    def reaction(self, content_author_id: int, reactor_id: int, target_type: TargetType,
                 target_id: int, reaction_type: str,
                 post_id: Optional[int] = None) -> Optional[Notification]:
        reactor = self._actor(reactor_id)
        if reactor is None:
            return None
        what = "post" if target_type == TargetType.POST else "comment"
        return self.notify(content_author_id, NotificationEvent(
            type=NotificationType.REACTION,
            title="New reaction",
            message=f"{reactor.display_name} reacted to your {what} with {reaction_type}",
            data={
                "reactor_id": reactor_id,
                "target_type": target_type.value,
                "target_id": target_id,
                "reaction_type": reaction_type,
            },
            action_url=target_link(target_type, target_id, post_id),
            actor_id=reactor_id,
        ))

    @best_effort()
    def reaction_added(self, reaction: Reaction) -> Optional[Notification]:
        """Notify the author of the content a new reaction points at."""
        target_type = TargetType(reaction.target_type)
        author_id = self.reaction_repo.get_target_author_id(target_type, reaction.target_id)
        if author_id is None:
            return None
        post_id = None
        if target_type == TargetType.COMMENT:
            post_id = self.reaction_repo.get_comment_post_id(reaction.target_id)
        return self.reaction(
            author_id, reaction.user_id, target_type, reaction.target_id, reaction.type, post_id=post_id
        )

    @best_effort()
    def post_approval(self, author_id: int, post_id: int, approved: bool,
                      moderator_id: Optional[int] = None) -> Optional[Notification]:
        post = self.post_repo.get_by_id(post_id)
        if post is None:
            logger.info("Skipping approval notification: post %s not found", post_id)
            return None
        group_name = post.group.name if post.group else "the community"
        verdict = "approved" if approved else "rejected"
        return self.notify(author_id, NotificationEvent(
            type=NotificationType.POST_APPROVED if approved else NotificationType.POST_REJECTED,
            title=f"Post {verdict}",
            message=f'Your post "{post.title or "Untitled"}" in {group_name} was {verdict}',
            data={
                "post_id": post_id,
                "group_name": group_name,
                "approved": approved,
            },
            action_url=f"/posts/{post_id}" if approved else None,
            actor_id=moderator_id,
        ))

    @best_effort()
    def group_join(self, group: Group, member_id: int, status: MemberStatus) -> Optional[Notification]:
        member = self._actor(member_id)
        if member is None:
            return None
        if status == MemberStatus.ACTIVE:
            message = f'{member.display_name} joined the group "{group.name}"'
        else:
            message = f'{member.display_name} asked to join the group "{group.name}"'
        return self.notify(group.owner_id, NotificationEvent(
            type=NotificationType.GROUP_JOIN_REQUEST,
            title="New group member",
            message=message,
            data={
                "group_id": group.id,
                "member_id": member_id,
                "status": status.value,
            },
            action_url=f"/groups/{group.slug}",
            actor_id=member_id,
        ))

    @best_effort(default=0)
    def group_post_created(self, post: Post, member_ids: Iterable[int]) -> int:
        return self.notify_many(member_ids, NotificationEvent(
            type=NotificationType.POST_CREATED,
            title="New post in your group",
            message="A new post was published in the group",
            data={
                "post_id": post.id,
                "group_id": post.group_id,
                "author_id": post.author_id,
            },
            action_url=f"/posts/{post.id}",
            actor_id=post.author_id,
        ))

    @best_effort(default=0)
    def mentions_in(self, author_id: int, content: str, target_type: TargetType,
                    target_id: int, post_id: Optional[int] = None) -> int:
        """Notify every user @mentioned in content. Returns how many were notified."""
        handles = extract_mentions(content)
        if not handles:
            return 0
        notified = 0
        for user in self.user_repo.get_by_handles(handles):
            if self.mention(user.id, author_id, target_type, target_id, content, post_id) is not None:
                notified += 1
        return notified
