"""Notification inbox and preference endpoint tests."""
from app.models import Notification, NotificationStatus, NotificationType
from app.repositories.notification_repository import NotificationRepository
from app.services.inbox_service import InboxService
from app.services.preference_service import DEFAULT_PREFERENCES


def _seed(db, user, unread=3, read=2):
    repo = NotificationRepository(db)
    created = []
    for i in range(unread + read):
        created.append(repo.create(
            user_id=user.id,
            type=NotificationType.REPLY,
            title=f"Reply {i}",
            message="Someone replied",
            data={"n": i},
        ))
    for notification in created[unread:]:
        repo.mark_read(notification)
    return created


# =============================================================================
# LISTING
# =============================================================================

class TestListNotifications:

    def test_unread_only_scenario(self, client, db, make_user, auth_headers):
        """3 unread + 2 read: unread_only lists 3 and reports unread_count 3."""
        user = make_user()
        _seed(db, user)

        response = client.get("/notifications", params={"unread_only": True}, headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert len(body["notifications"]) == 3
        assert body["unread_count"] == 3
        assert body["pagination"]["total"] == 3
        assert all(not n["is_read"] for n in body["notifications"])

    def test_unread_count_independent_of_page_size(self, db, make_user):
        user = make_user()
        _seed(db, user)

        page = InboxService(db).list_notifications(user.id, page=1, limit=1)

        assert len(page["notifications"]) == 1
        assert page["unread_count"] == 3
        assert page["pagination"] == {"page": 1, "limit": 1, "total": 5, "pages": 5}

    def test_newest_first(self, db, make_user):
        user = make_user()
        created = _seed(db, user, unread=3, read=0)

        listed = InboxService(db).list_notifications(user.id)["notifications"]

        assert [n.id for n in listed] == [n.id for n in reversed(created)]

    def test_only_own_notifications(self, client, db, make_user, auth_headers):
        owner, other = make_user(), make_user()
        _seed(db, owner)

        body = client.get("/notifications", headers=auth_headers(other)).json()

        assert body["notifications"] == []
        assert body["unread_count"] == 0

    def test_unread_count_endpoint(self, client, db, make_user, auth_headers):
        user = make_user()
        _seed(db, user, unread=4, read=1)

        response = client.get("/notifications/unread-count", headers=auth_headers(user))

        assert response.json() == {"count": 4}


# =============================================================================
# LIFECYCLE
# =============================================================================

class TestMarkRead:

    def test_mark_read_delivers(self, client, db, make_user, auth_headers):
        user = make_user()
        notification = _seed(db, user, unread=1, read=0)[0]

        response = client.post(f"/notifications/{notification.id}/read", headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert body["is_read"] is True
        assert body["status"] == "delivered"
        assert body["read_at"] is not None

    def test_second_read_keeps_first_timestamp(self, db, make_user):
        user = make_user()
        notification = _seed(db, user, unread=1, read=0)[0]
        service = InboxService(db)

        first = service.mark_read(user.id, notification.id).read_at
        second = service.mark_read(user.id, notification.id).read_at

        assert first == second

    def test_foreign_notification_is_forbidden(self, client, db, make_user, auth_headers):
        owner, intruder = make_user(), make_user()
        notification = _seed(db, owner, unread=1, read=0)[0]

        response = client.post(f"/notifications/{notification.id}/read", headers=auth_headers(intruder))

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"
        db.expire_all()
        assert db.get(Notification, notification.id).read_at is None

    def test_missing_notification_is_404(self, client, make_user, auth_headers):
        response = client.post("/notifications/4242/read", headers=auth_headers(make_user()))

        assert response.status_code == 404


class TestMarkAllRead:

    def test_idempotent(self, client, db, make_user, auth_headers):
        user = make_user()
        _seed(db, user)
        headers = auth_headers(user)

        first = client.post("/notifications/read-all", headers=headers)
        db.expire_all()
        snapshot = sorted((n.id, n.read_at, n.status) for n in db.query(Notification).all())
        second = client.post("/notifications/read-all", headers=headers)
        db.expire_all()

        assert first.json() == {"updated": 3}
        assert second.json() == {"updated": 0}
        assert sorted((n.id, n.read_at, n.status) for n in db.query(Notification).all()) == snapshot
        assert all(status == NotificationStatus.DELIVERED for _, _, status in snapshot)

    def test_leaves_other_users_alone(self, db, make_user):
        user, other = make_user(), make_user()
        _seed(db, user, unread=1, read=0)
        _seed(db, other, unread=2, read=0)

        InboxService(db).mark_all_read(user.id)

        assert InboxService(db).get_unread_count(other.id) == 2


class TestDelete:

    def test_delete_own(self, client, db, make_user, auth_headers):
        user = make_user()
        notification = _seed(db, user, unread=1, read=0)[0]

        response = client.delete(f"/notifications/{notification.id}", headers=auth_headers(user))

        assert response.status_code == 200
        assert db.query(Notification).count() == 0

    def test_delete_foreign_is_forbidden(self, client, db, make_user, auth_headers):
        owner = make_user()
        notification = _seed(db, owner, unread=1, read=0)[0]

        response = client.delete(f"/notifications/{notification.id}", headers=auth_headers(make_user()))

        assert response.status_code == 403
        assert db.query(Notification).count() == 1


# =============================================================================
# PREFERENCES
# =============================================================================

class TestPreferences:

    def test_defaults_when_never_set(self, client, make_user, auth_headers):
        response = client.get("/notifications/preferences", headers=auth_headers(make_user()))

        assert response.status_code == 200
        assert response.json() == DEFAULT_PREFERENCES

    def test_update_replaces_and_persists(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        updated = dict(DEFAULT_PREFERENCES)
        updated["reactions"] = {"inApp": False, "email": False, "push": True}
        updated["quietHours"] = {"enabled": True, "start": "23:30", "end": "06:00"}
        updated["digest"] = {"enabled": False, "frequency": "daily"}

        put = client.put("/notifications/preferences", json=updated, headers=headers)
        get = client.get("/notifications/preferences", headers=headers)

        assert put.status_code == 200
        assert put.json() == updated
        assert get.json() == updated

    def test_invalid_digest_frequency_is_422(self, client, make_user, auth_headers):
        payload = dict(DEFAULT_PREFERENCES)
        payload["digest"] = {"enabled": True, "frequency": "hourly"}

        response = client.put("/notifications/preferences", json=payload, headers=auth_headers(make_user()))

        assert response.status_code == 422

    def test_unknown_category_is_422(self, client, make_user, auth_headers):
        payload = dict(DEFAULT_PREFERENCES)
        payload["carrierPigeon"] = {"inApp": True, "email": False, "push": False}

        response = client.put("/notifications/preferences", json=payload, headers=auth_headers(make_user()))

        assert response.status_code == 422

    def test_preferences_do_not_filter_creation(self, client, db, make_user, make_post, auth_headers):
        author, reactor = make_user(), make_user()
        muted = dict(DEFAULT_PREFERENCES)
        muted["reactions"] = {"inApp": False, "email": False, "push": False}
        client.put("/notifications/preferences", json=muted, headers=auth_headers(author))
        post = make_post(author)

        client.post(f"/posts/{post.id}/reactions", headers=auth_headers(reactor))

        assert db.query(Notification).filter(Notification.user_id == author.id).count() == 1
