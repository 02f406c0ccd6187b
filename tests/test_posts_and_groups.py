"""
Collaborator flow tests: posting, commenting, moderation and joining groups.

Each action reports its own outcome; notifications are a side effect that
never changes it.
"""
from app.models import (
    Comment,
    GroupMember,
    GroupVisibility,
    MemberStatus,
    Notification,
    NotificationType,
    Post,
    PostStatus,
)
from app.repositories.group_repository import GroupRepository


def _notifications_for(db, user, type_=None):
    query = db.query(Notification).filter(Notification.user_id == user.id)
    if type_ is not None:
        query = query.filter(Notification.type == type_)
    return query.all()


# =============================================================================
# POSTS
# =============================================================================

class TestCreatePost:

    def test_non_member_is_forbidden(self, client, db, make_user, make_group, auth_headers):
        """A non-member posting into a group gets 403 and leaves no trace."""
        owner, outsider = make_user(), make_user()
        group = make_group(owner)

        response = client.post(
            "/posts", json={"content": "let me in", "group_id": group.id}, headers=auth_headers(outsider)
        )

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"
        assert db.query(Post).count() == 0
        assert db.query(Notification).count() == 0

    def test_unknown_group_is_404(self, client, make_user, auth_headers):
        response = client.post(
            "/posts", json={"content": "hello", "group_id": 404}, headers=auth_headers(make_user())
        )

        assert response.status_code == 404

    def test_group_post_notifies_other_active_members(self, client, db, make_user, make_group, auth_headers):
        owner, member, pending = make_user(), make_user(), make_user()
        group = make_group(owner)
        repo = GroupRepository(db)
        repo.add_member(group.id, member.id, MemberStatus.ACTIVE)
        repo.add_member(group.id, pending.id, MemberStatus.PENDING)

        response = client.post(
            "/posts", json={"title": "Meetup", "content": "Saturday at 10", "group_id": group.id},
            headers=auth_headers(member),
        )

        assert response.status_code == 201
        assert response.json()["status"] == "published"
        assert len(_notifications_for(db, owner, NotificationType.POST_CREATED)) == 1
        assert _notifications_for(db, member) == []
        assert _notifications_for(db, pending) == []

    def test_mentions_in_post_notify_mentioned_users(self, client, db, make_user, auth_headers):
        author, friend = make_user("poster"), make_user("friend")

        response = client.post("/posts", json={"content": "cc @friend"}, headers=auth_headers(author))

        mentions = _notifications_for(db, friend, NotificationType.MENTION)
        assert len(mentions) == 1
        assert mentions[0].action_url == f"/posts/{response.json()['id']}"

    def test_blank_content_is_422(self, client, make_user, auth_headers):
        response = client.post("/posts", json={"content": "   "}, headers=auth_headers(make_user()))

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "content"

    def test_get_post_counts_views(self, client, make_user, make_post):
        post = make_post(make_user())

        client.get(f"/posts/{post.id}")
        response = client.get(f"/posts/{post.id}")

        assert response.json()["view_count"] == 2


class TestModeration:

    def _pending_post(self, client, db, make_user, make_group, auth_headers):
        owner, member = make_user(), make_user()
        group = make_group(owner, slug="quiet-room", post_approval_required=True)
        GroupRepository(db).add_member(group.id, member.id, MemberStatus.ACTIVE)
        response = client.post(
            "/posts", json={"title": "Draft", "content": "please approve", "group_id": group.id},
            headers=auth_headers(member),
        )
        return owner, member, response.json()

    def test_post_starts_pending_without_fan_out(self, client, db, make_user, make_group, auth_headers):
        owner, _, post = self._pending_post(client, db, make_user, make_group, auth_headers)

        assert post["status"] == "pending"
        assert post["published_at"] is None
        assert _notifications_for(db, owner) == []
        assert client.get("/posts").json()["pagination"]["total"] == 0

    def test_approval_publishes_and_notifies_author(self, client, db, make_user, make_group, auth_headers):
        owner, member, post = self._pending_post(client, db, make_user, make_group, auth_headers)

        response = client.patch(
            f"/posts/{post['id']}/moderation", json={"approved": True}, headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "published"
        assert len(_notifications_for(db, member, NotificationType.POST_APPROVED)) == 1
        assert client.get("/posts").json()["pagination"]["total"] == 1

    def test_rejection_notifies_author(self, client, db, make_user, make_group, auth_headers):
        owner, member, post = self._pending_post(client, db, make_user, make_group, auth_headers)

        response = client.patch(
            f"/posts/{post['id']}/moderation", json={"approved": False}, headers=auth_headers(owner)
        )

        assert response.json()["status"] == "rejected"
        rejected = _notifications_for(db, member, NotificationType.POST_REJECTED)
        assert len(rejected) == 1
        assert rejected[0].action_url is None

    def test_member_cannot_moderate(self, client, db, make_user, make_group, auth_headers):
        _, member, post = self._pending_post(client, db, make_user, make_group, auth_headers)

        response = client.patch(
            f"/posts/{post['id']}/moderation", json={"approved": True}, headers=auth_headers(member)
        )

        assert response.status_code == 403

    def test_second_decision_is_rejected(self, client, db, make_user, make_group, auth_headers):
        owner, _, post = self._pending_post(client, db, make_user, make_group, auth_headers)
        headers = auth_headers(owner)
        client.patch(f"/posts/{post['id']}/moderation", json={"approved": True}, headers=headers)

        response = client.patch(f"/posts/{post['id']}/moderation", json={"approved": False}, headers=headers)

        assert response.status_code == 422
        db.expire_all()
        assert db.get(Post, post["id"]).status == PostStatus.PUBLISHED


# =============================================================================
# COMMENTS
# =============================================================================

class TestComments:

    def test_comment_bumps_counter_and_notifies_author(self, client, db, make_user, make_post, auth_headers):
        author, commenter = make_user(), make_user(name="Cleo")
        post = make_post(author)
        long_text = "c" * 120

        response = client.post(
            f"/posts/{post.id}/comments", json={"content": long_text}, headers=auth_headers(commenter)
        )

        assert response.status_code == 201
        db.expire_all()
        assert db.get(Post, post.id).comment_count == 1
        replies = _notifications_for(db, author, NotificationType.REPLY)
        assert len(replies) == 1
        assert replies[0].data["content"] == "c" * 100 + "..."
        assert replies[0].action_url == f"/posts/{post.id}#comment-{response.json()['id']}"

    def test_commenting_on_own_post_is_silent(self, client, db, make_user, make_post, auth_headers):
        author = make_user()
        post = make_post(author)

        client.post(f"/posts/{post.id}/comments", json={"content": "bump"}, headers=auth_headers(author))

        assert db.query(Notification).count() == 0

    def test_parent_from_other_post_is_422(self, client, db, make_user, make_post, auth_headers):
        user = make_user()
        first, second = make_post(user), make_post(user)
        parent = Comment(post_id=first.id, author_id=user.id, content="elsewhere")
        db.add(parent)
        db.commit()

        response = client.post(
            f"/posts/{second.id}/comments",
            json={"content": "reply", "parent_id": parent.id},
            headers=auth_headers(user),
        )

        assert response.status_code == 422
        db.expire_all()
        assert db.get(Post, second.id).comment_count == 0

    def test_comment_on_missing_post_is_404(self, client, make_user, auth_headers):
        response = client.post("/posts/999/comments", json={"content": "hi"}, headers=auth_headers(make_user()))

        assert response.status_code == 404

    def test_list_top_level_comments(self, client, make_user, make_post, auth_headers):
        user = make_user()
        post = make_post(user)
        headers = auth_headers(user)
        top = client.post(f"/posts/{post.id}/comments", json={"content": "top"}, headers=headers).json()
        client.post(
            f"/posts/{post.id}/comments", json={"content": "nested", "parent_id": top["id"]}, headers=headers
        )

        body = client.get(f"/posts/{post.id}/comments").json()

        assert body["total"] == 1
        assert [c["content"] for c in body["comments"]] == ["top"]


# =============================================================================
# GROUPS
# =============================================================================

class TestGroups:

    def test_create_group_makes_owner_member(self, client, db, make_user, auth_headers):
        owner = make_user()

        response = client.post(
            "/groups", json={"name": "Runners", "slug": "runners"}, headers=auth_headers(owner)
        )

        assert response.status_code == 201
        membership = db.query(GroupMember).one()
        assert membership.user_id == owner.id
        assert membership.can_moderate

    def test_duplicate_slug_is_409(self, client, make_user, make_group, auth_headers):
        make_group(make_user(), slug="runners")

        response = client.post(
            "/groups", json={"name": "Other runners", "slug": "runners"}, headers=auth_headers(make_user())
        )

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_join_public_group_notifies_owner(self, client, db, make_user, make_group, auth_headers):
        owner, joiner = make_user(), make_user(name="Jo")
        group = make_group(owner)

        response = client.post(f"/groups/{group.slug}/join", headers=auth_headers(joiner))

        assert response.status_code == 201
        assert response.json()["status"] == "active"
        notes = _notifications_for(db, owner, NotificationType.GROUP_JOIN_REQUEST)
        assert len(notes) == 1
        assert notes[0].message == f'Jo joined the group "{group.name}"'

    def test_join_private_group_is_pending(self, client, make_user, make_group, auth_headers):
        group = make_group(make_user(), slug="inner-circle", visibility=GroupVisibility.PRIVATE)

        response = client.post(f"/groups/{group.slug}/join", headers=auth_headers(make_user()))

        assert response.json()["status"] == "pending"

    def test_joining_twice_is_409(self, client, make_user, make_group, auth_headers):
        group = make_group(make_user())
        headers = auth_headers(make_user())
        client.post(f"/groups/{group.slug}/join", headers=headers)

        response = client.post(f"/groups/{group.slug}/join", headers=headers)

        assert response.status_code == 409

    def test_join_survives_dispatch_failure(self, client, db, make_user, make_group, auth_headers, monkeypatch):
        from app.repositories.notification_repository import NotificationRepository
        from sqlalchemy.exc import OperationalError

        def broken_create(self, **kwargs):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(NotificationRepository, "create", broken_create)
        group = make_group(make_user())

        response = client.post(f"/groups/{group.slug}/join", headers=auth_headers(make_user()))

        assert response.status_code == 201
        assert db.query(Notification).count() == 0
        assert client.get("/ops/metrics").json()["notifications_failed"] == 1
