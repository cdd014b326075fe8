# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from echo_stage.core.security import create_access_token
from echo_stage.core.settings import Settings
from echo_stage.db.session import Base, enable_sqlite_savepoints
from echo_stage.db.session import get_db as app_get_session
from echo_stage.main import app as fastapi_app
from echo_stage.models import Post, User, UserProfile
from echo_stage.schemas.post import PostDetail
from echo_stage.services import post_service

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)
_AUDIO_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session whose commits only release SAVEPOINTs inside a rolled back transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()


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


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return Settings()


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Create an account, with a profile unless ``with_profile`` is False."""

    def _make_user(city: str = "singapore", *, with_profile: bool = True) -> User:
        user = User()
        db_session.add(user)
        db_session.flush()
        if with_profile:
            db_session.add(
                UserProfile(
                    user_id=user.id,
                    username=f"listener{next(_USERNAME_COUNTER)}",
                    city=city,
                )
            )
            db_session.flush()
        return user

    return _make_user


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., PostDetail]:
    """Publish a top-level post through the service layer."""

    def _make_post(
        user: User,
        *,
        duration: int = 30,
        tags: tuple[str, ...] = (),
        city: str | None = None,
    ) -> PostDetail:
        key = f"uploads/{user.id}/clip-{next(_AUDIO_COUNTER)}.m4a"
        return post_service.create_post(
            db_session,
            user_id=user.id,
            audio=post_service.audio_locator_for_key(key),
            duration=duration,
            tags=tags,
            city=city,
        )

    return _make_post


@pytest.fixture()
def make_response(db_session: Session) -> Callable[..., PostDetail]:
    """Respond to ``parent_id`` as ``user`` through the service layer."""

    def _make_response(user: User, parent_id: int, *, duration: int = 10) -> PostDetail:
        key = f"uploads/{user.id}/reply-{next(_AUDIO_COUNTER)}.m4a"
        return post_service.create_response(
            db_session,
            user_id=user.id,
            parent_id=parent_id,
            audio=post_service.audio_locator_for_key(key),
            duration=duration,
        )

    return _make_response


@pytest.fixture()
def set_counts(db_session: Session) -> Callable[..., None]:
    """Force counter values on a post to set up ordering scenarios."""

    def _set_counts(post_id: int, **values: int) -> None:
        db_session.execute(update(Post).where(Post.id == post_id).values(**values))
        db_session.flush()

    return _set_counts


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    return make_user()


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    return make_user()


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}


@pytest.fixture()
def test_post(make_post: Callable[..., PostDetail], test_user: User) -> PostDetail:
    return make_post(test_user, tags=("x",))
