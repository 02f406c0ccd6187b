"""Shared fixtures: in-memory SQLite database, API client and user factories."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine, get_db
from app.core.ops_metrics import reset_ops_metrics
from app.core.security import create_access_token
from app.main import app
from app.models import GroupVisibility
from app.repositories.group_repository import GroupRepository
from app.repositories.post_repository import PostRepository
from app.repositories.user_repository import UserRepository


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clean_metrics():
    reset_ops_metrics()
    yield
    reset_ops_metrics()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(handle=None, name=None):
        counter["n"] += 1
        handle = handle or f"user{counter['n']}"
        return UserRepository(db).create(
            email=f"{handle}@example.com",
            handle=handle,
            name=name if name is not None else handle.capitalize(),
        )

    return _make


@pytest.fixture
def make_group(db):
    def _make(owner, slug="garden-club", visibility=GroupVisibility.PUBLIC, post_approval_required=False):
        return GroupRepository(db).create(
            name=slug.replace("-", " ").title(),
            slug=slug,
            owner_id=owner.id,
            visibility=visibility,
            post_approval_required=post_approval_required,
        )

    return _make


@pytest.fixture
def make_post(db):
    def _make(author, content="Hello world", title=None, group=None):
        return PostRepository(db).create(
            author_id=author.id,
            content=content,
            title=title,
            group_id=group.id if group else None,
        )

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
