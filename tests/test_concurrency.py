"""Counters stay exact when many sessions write at once."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, event, func, select
from sqlalchemy.orm import sessionmaker

from echo_stage.core.errors import PostNotFoundError
from echo_stage.db.session import Base
from echo_stage.models import Bookmark, Post, User, UserProfile
from echo_stage.services import bookmark_service, post_service

WORKERS = 8


@pytest.fixture()
def session_factory(tmp_path):
    """Sessions on a shared file database, one connection per thread."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrent.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    # Take the write lock up front so two readers never deadlock on upgrade.
    @event.listens_for(engine, "begin")
    def _begin_immediate(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    finally:
        engine.dispose()


@pytest.fixture()
def crowd(session_factory):
    """An author with one post and WORKERS other users, all with profiles."""
    with session_factory.begin() as session:
        users = [User() for _ in range(WORKERS + 1)]
        session.add_all(users)
        session.flush()
        session.add_all(
            UserProfile(user_id=user.id, username=f"crowd{user.id}", city="singapore")
            for user in users
        )
        session.flush()
        parent = post_service.create_post(
            session,
            user_id=users[0].id,
            audio=post_service.audio_locator_for_key("uploads/parent.m4a"),
            duration=30,
        )
        return parent.id, [user.id for user in users[1:]]


def _live_counts(session_factory, post_id: int) -> tuple[int, int, int, int]:
    with session_factory() as session:
        post = session.get(Post, post_id)
        responses = session.scalar(
            select(func.count())
            .select_from(Post)
            .where(Post.parent_id == post_id, Post.active.is_(True))
        )
        bookmarks = session.scalar(
            select(func.count()).select_from(Bookmark).where(Bookmark.post_id == post_id)
        )
        return post.response_count, responses, post.bookmark_count, bookmarks


def test_concurrent_responses_and_bookmarks_keep_counters_exact(
    session_factory, crowd
) -> None:
    parent_id, user_ids = crowd

    def engage(index: int, user_id: int) -> int:
        with session_factory.begin() as session:
            response = post_service.create_response(
                session,
                user_id=user_id,
                parent_id=parent_id,
                audio=post_service.audio_locator_for_key(f"uploads/reply-{index}.m4a"),
                duration=5,
            )
        with session_factory.begin() as session:
            bookmark_service.bookmark(session, user_id, parent_id)
        if index % 2 == 0:
            with session_factory.begin() as session:
                bookmark_service.remove_bookmark(session, user_id, parent_id)
        return response.id

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        response_ids = list(pool.map(engage, range(WORKERS), user_ids))

    assert len(set(response_ids)) == WORKERS
    response_count, live_responses, bookmark_count, live_bookmarks = _live_counts(
        session_factory, parent_id
    )
    assert response_count == live_responses == WORKERS
    assert bookmark_count == live_bookmarks == WORKERS // 2


def test_racing_deletes_decrement_parent_once(session_factory, crowd) -> None:
    parent_id, user_ids = crowd
    responder = user_ids[0]
    with session_factory.begin() as session:
        response_id = post_service.create_response(
            session,
            user_id=responder,
            parent_id=parent_id,
            audio=post_service.audio_locator_for_key("uploads/reply.m4a"),
            duration=5,
        ).id

    def delete(_: int) -> bool:
        try:
            with session_factory.begin() as session:
                return post_service.delete_post(session, response_id, responder)
        except PostNotFoundError:
            return False

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        outcomes = list(pool.map(delete, range(WORKERS)))

    assert outcomes.count(True) == 1
    response_count, live_responses, _, _ = _live_counts(session_factory, parent_id)
    assert response_count == live_responses == 0
