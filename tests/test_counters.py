"""Atomic counter maintenance."""

from echo_stage.repositories import PostRepository
from echo_stage.services.counters import CounterField, decrement, increment


def _counts(db_session, post_id):
    post = PostRepository(db_session).get_by_id(post_id)
    return post.response_count, post.bookmark_count


def test_increment_touches_only_named_counter(db_session, test_post) -> None:
    assert increment(db_session, test_post.id, CounterField.BOOKMARKS) is True
    assert increment(db_session, test_post.id, CounterField.BOOKMARKS) is True
    assert increment(db_session, test_post.id, CounterField.RESPONSES) is True

    assert _counts(db_session, test_post.id) == (1, 2)


def test_decrement_floors_at_zero(db_session, test_post) -> None:
    increment(db_session, test_post.id, CounterField.RESPONSES)

    for _ in range(3):
        assert decrement(db_session, test_post.id, CounterField.RESPONSES) is True

    assert _counts(db_session, test_post.id) == (0, 0)


def test_missing_post_reports_false(db_session) -> None:
    assert increment(db_session, 424242, CounterField.RESPONSES) is False
    assert decrement(db_session, 424242, CounterField.BOOKMARKS) is False


def test_counter_update_stamps_updated_at(db_session, test_post) -> None:
    before = PostRepository(db_session).get_by_id(test_post.id).updated_at

    increment(db_session, test_post.id, CounterField.BOOKMARKS)

    after = PostRepository(db_session).get_by_id(test_post.id).updated_at
    assert after >= before
