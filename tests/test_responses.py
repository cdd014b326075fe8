"""Response creation and deletion keep the parent's response_count exact."""

import pytest
from sqlalchemy import func, select

from echo_stage.core.errors import InternalError, NotAuthorizedError, PostNotFoundError
from echo_stage.models import Notification, Post, PostType
from echo_stage.services import counters, post_service


def _response_count(db_session, post_id: int) -> int:
    return post_service.get_post_by_id(db_session, post_id).response_count


def _count_rows(db_session, model, *criteria) -> int:
    return db_session.scalar(select(func.count()).select_from(model).where(*criteria))


def test_respond_then_delete_round_trips_counter(
    db_session, make_post, make_response, test_user, other_user
) -> None:
    post_a = make_post(test_user, duration=30, tags=("x",))
    response_b = make_response(other_user, post_a.id, duration=10)

    assert response_b.type == PostType.RESPONSE
    assert response_b.parent_id == post_a.id
    assert _response_count(db_session, post_a.id) == 1

    assert post_service.delete_post(db_session, response_b.id, other_user.id) is True
    assert _response_count(db_session, post_a.id) == 0


def test_response_count_tracks_active_responses(
    db_session, make_post, make_response, test_user, other_user
) -> None:
    parent = make_post(test_user)
    responses = [make_response(other_user, parent.id) for _ in range(4)]
    assert _response_count(db_session, parent.id) == 4

    for response in responses[:3]:
        post_service.delete_post(db_session, response.id, other_user.id)

    active = _count_rows(
        db_session, Post, Post.parent_id == parent.id, Post.active.is_(True)
    )
    assert _response_count(db_session, parent.id) == active == 1


def test_response_inherits_parent_city(
    db_session, make_post, make_response, make_user, test_user
) -> None:
    parent = make_post(test_user, city="singapore")
    traveller = make_user(city="osaka")

    response = make_response(traveller, parent.id)

    assert response.city == "singapore"


def test_missing_parent_aborts_without_side_effects(db_session, test_user) -> None:
    with pytest.raises(PostNotFoundError):
        post_service.create_response(
            db_session,
            user_id=test_user.id,
            parent_id=9999,
            audio=post_service.audio_locator_for_key("uploads/orphan.m4a"),
            duration=5,
        )

    assert _count_rows(db_session, Post, Post.type == PostType.RESPONSE) == 0
    assert _count_rows(db_session, Notification) == 0


def test_inactive_parent_is_not_found(db_session, make_post, make_response, test_user, other_user) -> None:
    parent = make_post(test_user)
    post_service.delete_post(db_session, parent.id, test_user.id)

    with pytest.raises(PostNotFoundError):
        make_response(other_user, parent.id)


class _FailingSink:
    def enqueue(self, recipient_id, event) -> None:
        raise RuntimeError("notification store unavailable")


def test_failed_notification_rolls_back_response_and_counter(
    db_session, make_post, test_user, other_user
) -> None:
    parent = make_post(test_user)

    with pytest.raises(RuntimeError):
        post_service.create_response(
            db_session,
            user_id=other_user.id,
            parent_id=parent.id,
            audio=post_service.audio_locator_for_key("uploads/reply.m4a"),
            duration=5,
            notifications=_FailingSink(),
        )

    assert _response_count(db_session, parent.id) == 0
    assert _count_rows(db_session, Post, Post.parent_id == parent.id) == 0


def test_lost_parent_counter_update_rolls_back_response(
    db_session, make_post, test_user, other_user, monkeypatch
) -> None:
    parent = make_post(test_user)
    monkeypatch.setattr(counters, "increment", lambda *args, **kwargs: False)

    with pytest.raises(InternalError):
        post_service.create_response(
            db_session,
            user_id=other_user.id,
            parent_id=parent.id,
            audio=post_service.audio_locator_for_key("uploads/reply.m4a"),
            duration=5,
        )

    assert _count_rows(db_session, Post, Post.parent_id == parent.id) == 0
    assert _count_rows(db_session, Notification) == 0


def test_response_notifies_parent_owner(
    db_session, make_post, make_response, test_user, other_user
) -> None:
    parent = make_post(test_user)
    response = make_response(other_user, parent.id)

    notifications = db_session.scalars(select(Notification)).all()

    assert len(notifications) == 1
    assert notifications[0].user_id == test_user.id
    assert notifications[0].data == {
        "type": "RESPONSE",
        "postId": parent.id,
        "responseId": response.id,
        "responderId": other_user.id,
    }


def test_self_response_does_not_notify(db_session, make_post, make_response, test_user) -> None:
    parent = make_post(test_user)
    make_response(test_user, parent.id)

    assert _count_rows(db_session, Notification) == 0
    assert _response_count(db_session, parent.id) == 1


def test_second_delete_is_not_found_and_keeps_counter(
    db_session, make_post, make_response, test_user, other_user
) -> None:
    parent = make_post(test_user)
    first = make_response(other_user, parent.id)
    make_response(other_user, parent.id)

    post_service.delete_post(db_session, first.id, other_user.id)
    with pytest.raises(PostNotFoundError):
        post_service.delete_post(db_session, first.id, other_user.id)

    assert _response_count(db_session, parent.id) == 1


def test_only_owner_may_delete(db_session, make_post, test_user, other_user) -> None:
    post = make_post(test_user)

    with pytest.raises(NotAuthorizedError):
        post_service.delete_post(db_session, post.id, other_user.id)

    assert post_service.get_post_by_id(db_session, post.id) is not None


def test_create_requires_profile(db_session, make_user) -> None:
    user = make_user(with_profile=False)

    with pytest.raises(ValueError):
        post_service.create_post(
            db_session,
            user_id=user.id,
            audio=post_service.audio_locator_for_key("uploads/clip.m4a"),
            duration=12,
        )


def test_create_rejects_non_positive_duration(db_session, test_user) -> None:
    with pytest.raises(ValueError):
        post_service.create_post(
            db_session,
            user_id=test_user.id,
            audio=post_service.audio_locator_for_key("uploads/clip.m4a"),
            duration=0,
        )


def test_audio_locator_joins_base_url_and_key(test_settings) -> None:
    locator = post_service.audio_locator_for_key("/uploads/7/clip.m4a")

    assert locator.key == "/uploads/7/clip.m4a"
    assert locator.url == f"{test_settings.audio_public_base_url.rstrip('/')}/uploads/7/clip.m4a"
