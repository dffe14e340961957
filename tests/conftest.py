# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from io import BytesIO
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from agora.core.permissions import Permission
from agora.db.session import Base
from agora.db.session import get_db as app_get_session
from agora.main import app as fastapi_app
from agora.models import Post, User
from agora.services import credentials, post_service, user_service

TEST_DB_URL = "sqlite://"
PASSWORD = "Secret123"

_EMAIL_COUNTER = count(1)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test; commits inside services are real."""
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory registering users with a valid password."""

    def _make_user(name: str = "Test User", permissions: Permission = Permission.NONE) -> User:
        email = f"user{next(_EMAIL_COUNTER)}@example.com"
        user = user_service.register_user(db_session, email, name, PASSWORD)
        if permissions:
            user.permissions = int(permissions)
            db_session.commit()
            db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted test user."""
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("Other User")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    """Create a user holding every permission."""
    return make_user("Admin User", Permission.USERS | Permission.POSTS)


def _bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {credentials.issue_token(user)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return _bearer(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return _bearer(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the privileged user."""
    return _bearer(admin_user)


@pytest.fixture()
def test_post(db_session: Session, test_user: User) -> Post:
    """Create a baseline post for tests."""
    return post_service.create_post(
        db_session,
        author_id=test_user.id,
        content="Test post content",
    )


@pytest.fixture()
def image_bytes() -> Callable[..., bytes]:
    """Return a factory producing encoded test images."""

    def _image_bytes(size: tuple[int, int] = (64, 48), fmt: str = "PNG") -> bytes:
        buffer = BytesIO()
        Image.new("RGB", size, color=(200, 40, 90)).save(buffer, format=fmt)
        return buffer.getvalue()

    return _image_bytes
