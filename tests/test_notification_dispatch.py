"""
Notification dispatcher tests.

Covers preview truncation, self-notification suppression, batch fan-out
and failure isolation.
"""
import pytest
from sqlalchemy.exc import OperationalError

from app.core.ops_metrics import get_ops_metrics
from app.models import Notification, NotificationStatus, NotificationType, TargetType
from app.schemas.notification import NotificationEvent
from app.services.notification_service import (
    NotificationService,
    extract_mentions,
    target_link,
    truncate_preview,
)


def _event(actor_id=None, **overrides):
    fields = {
        "type": NotificationType.SYSTEM_ANNOUNCEMENT,
        "title": "Maintenance",
        "message": "The site will be down tonight",
        "data": {"window": "22:00-23:00"},
        "action_url": "/status",
        "actor_id": actor_id,
    }
    fields.update(overrides)
    return NotificationEvent(**fields)


# =============================================================================
# HELPERS
# =============================================================================

class TestTruncatePreview:

    def test_exactly_limit_is_verbatim(self):
        content = "x" * 100
        assert truncate_preview(content) == content

    def test_one_over_limit_is_cut_with_ellipsis(self):
        preview = truncate_preview("y" * 101)
        assert preview == "y" * 100 + "..."

    def test_short_content_unchanged(self):
        assert truncate_preview("short") == "short"

    def test_explicit_limit(self):
        assert truncate_preview("abcdef", limit=3) == "abc..."


class TestMentionParsing:

    def test_unique_handles_in_order(self):
        assert extract_mentions("hey @bob and @alice, @Bob again") == ["bob", "alice"]

    def test_email_addresses_are_not_mentions(self):
        assert extract_mentions("mail me at carol@example.com") == []

    def test_no_content(self):
        assert extract_mentions("") == []

    def test_target_links(self):
        assert target_link(TargetType.POST, 5) == "/posts/5"
        assert target_link(TargetType.COMMENT, 9, post_id=5) == "/posts/5#comment-9"


# =============================================================================
# CORE CREATION
# =============================================================================

class TestNotify:

    def test_creates_scheduled_unread_notification(self, db, make_user):
        user = make_user()

        notification = NotificationService(db).notify(user.id, _event())

        assert notification.status == NotificationStatus.SCHEDULED
        assert notification.read_at is None
        assert notification.scheduled_for is not None
        assert notification.meta == {"data": {"window": "22:00-23:00"}, "actionUrl": "/status"}
        assert get_ops_metrics()["notifications_created"] == 1

    def test_metadata_omits_missing_action_url(self, db, make_user):
        user = make_user()

        notification = NotificationService(db).notify(user.id, _event(action_url=None))

        assert "actionUrl" not in notification.meta

    def test_actor_is_never_notified(self, db, make_user):
        user = make_user()

        result = NotificationService(db).notify(user.id, _event(actor_id=user.id))

        assert result is None
        assert db.query(Notification).count() == 0
        assert get_ops_metrics()["notifications_suppressed"] == 1

    def test_storage_failure_is_swallowed(self, db, make_user, monkeypatch):
        user = make_user()
        service = NotificationService(db)

        def broken_create(**kwargs):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(service.repo, "create", broken_create)

        assert service.notify(user.id, _event()) is None
        metrics = get_ops_metrics()
        assert metrics["notifications_failed"] == 1
        assert metrics["dispatch_failure_rate_pct"] == 100.0


class TestNotifyMany:

    def test_batch_dedupes_and_skips_actor(self, db, make_user):
        actor, a, b = make_user(), make_user(), make_user()

        created = NotificationService(db).notify_many([a.id, b.id, a.id, actor.id], _event(actor_id=actor.id))

        assert created == 2
        recipients = sorted(n.user_id for n in db.query(Notification).all())
        assert recipients == sorted([a.id, b.id])
        assert get_ops_metrics()["notifications_suppressed"] == 1

    def test_empty_recipient_list(self, db):
        assert NotificationService(db).notify_many([], _event()) == 0

    def test_batch_failure_writes_nothing(self, db, make_user, monkeypatch):
        a, b = make_user(), make_user()
        service = NotificationService(db)

        def broken_create_many(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("lock timeout"))

        monkeypatch.setattr(service.repo, "create_many", broken_create_many)

        assert service.notify_many([a.id, b.id], _event()) == 0
        assert db.query(Notification).count() == 0


# =============================================================================
# EVENT BUILDERS
# =============================================================================

class TestBuilders:

    def test_reply_truncates_long_content(self, db, make_user, make_post):
        author, replier = make_user(), make_user(name="Rita")
        post = make_post(author)

        notification = NotificationService(db).reply(author.id, replier.id, post.id, 3, "r" * 150)

        assert notification.type == NotificationType.REPLY
        assert notification.data["content"] == "r" * 100 + "..."
        assert notification.message == "Rita replied to your post"

    def test_reply_to_self_is_suppressed(self, db, make_user, make_post):
        author = make_user()
        post = make_post(author)

        assert NotificationService(db).reply(author.id, author.id, post.id, 1, "me again") is None
        assert db.query(Notification).count() == 0

    def test_unknown_actor_skips_notification(self, db, make_user):
        recipient = make_user()

        result = NotificationService(db).mention(recipient.id, 9999, TargetType.POST, 1, "hi")

        assert result is None
        assert db.query(Notification).count() == 0

    def test_mentions_in_notifies_each_handle_once(self, db, make_user):
        author = make_user("writer")
        dana, eli = make_user("dana"), make_user("eli")

        count = NotificationService(db).mentions_in(
            author.id, "thanks @dana and @eli, also @DANA and @writer and @ghost", TargetType.POST, 8
        )

        assert count == 2
        recipients = sorted(n.user_id for n in db.query(Notification).all())
        assert recipients == sorted([dana.id, eli.id])

    @pytest.mark.parametrize("approved, expected_type", [
        (True, NotificationType.POST_APPROVED),
        (False, NotificationType.POST_REJECTED),
    ])
    def test_post_approval(self, db, make_user, make_post, approved, expected_type):
        author, moderator = make_user(), make_user()
        post = make_post(author, title="Spring swap")

        notification = NotificationService(db).post_approval(author.id, post.id, approved, moderator.id)

        assert notification.type == expected_type
        assert "Spring swap" in notification.message
        assert (notification.action_url is not None) == approved
