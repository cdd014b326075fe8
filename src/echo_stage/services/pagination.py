"""Keyset pagination over posts and bookmarks.

Every supported order is an entry in a lookup table keyed by :class:`SortBy`.
An entry names the primary sort column, the tie-breaking id column, the
direction, and how the primary key value travels inside a cursor. Cursors
have the wire form ``"<key value>:<id>"``.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, and_, or_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from echo_stage.core.settings import settings
from echo_stage.models.bookmark import Bookmark
from echo_stage.models.post import Post, PostTag, PostType

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")

# Largest value a BIGINT column or a SQLite INTEGER can bind.
MAX_BIGINT = 2**63 - 1


class SortBy(str, enum.Enum):
    """Feed orderings exposed to callers."""

    NEWEST = "NEWEST"
    OLDEST = "OLDEST"
    MOST_SAVED = "MOST_SAVED"
    LEAST_SAVED = "LEAST_SAVED"
    MOST_RESPONSES = "MOST_RESPONSES"
    LEAST_RESPONSES = "LEAST_RESPONSES"


@dataclass(frozen=True)
class KeyCodec:
    """Serializes the primary sort value to and from its cursor text."""

    encode: Callable[[Any], str]
    decode: Callable[[str], Any]


TIMESTAMP_CODEC = KeyCodec(encode=lambda value: value.isoformat(), decode=datetime.fromisoformat)


def _decode_count(raw: str) -> int:
    value = int(raw)
    if not -MAX_BIGINT - 1 <= value <= MAX_BIGINT:
        raise ValueError(f"count {value} out of range")
    return value


COUNT_CODEC = KeyCodec(encode=str, decode=_decode_count)


@dataclass(frozen=True)
class KeysetOrder:
    """One total ordering: ``(key, id)`` in a single direction."""

    key: InstrumentedAttribute[Any]
    id: InstrumentedAttribute[int]
    descending: bool
    codec: KeyCodec

    def order_by(self) -> tuple[ColumnElement[Any], ColumnElement[Any]]:
        if self.descending:
            return self.key.desc(), self.id.desc()
        return self.key.asc(), self.id.asc()


POST_ORDERS: dict[SortBy, KeysetOrder] = {
    SortBy.NEWEST: KeysetOrder(Post.created_at, Post.id, True, TIMESTAMP_CODEC),
    SortBy.OLDEST: KeysetOrder(Post.created_at, Post.id, False, TIMESTAMP_CODEC),
    SortBy.MOST_SAVED: KeysetOrder(Post.bookmark_count, Post.id, True, COUNT_CODEC),
    SortBy.LEAST_SAVED: KeysetOrder(Post.bookmark_count, Post.id, False, COUNT_CODEC),
    SortBy.MOST_RESPONSES: KeysetOrder(Post.response_count, Post.id, True, COUNT_CODEC),
    SortBy.LEAST_RESPONSES: KeysetOrder(Post.response_count, Post.id, False, COUNT_CODEC),
}

# The saved list is ordered by when the bookmark was made.
BOOKMARK_ORDERS: dict[SortBy, KeysetOrder] = {
    SortBy.NEWEST: KeysetOrder(Bookmark.created_at, Bookmark.id, True, TIMESTAMP_CODEC),
    SortBy.OLDEST: KeysetOrder(Bookmark.created_at, Bookmark.id, False, TIMESTAMP_CODEC),
}


def encode_cursor(order: KeysetOrder, key_value: Any, row_id: int) -> str:
    return f"{order.codec.encode(key_value)}:{row_id}"


def decode_cursor(order: KeysetOrder, cursor: str | None) -> tuple[Any, int] | None:
    """Parse a cursor for ``order``; return None when absent or malformed.

    Malformed cursors restart from the first page instead of failing. The
    split happens at the last colon because ISO timestamps contain colons.
    """
    if not cursor:
        return None
    raw_key, sep, raw_id = cursor.rpartition(":")
    if not sep or not raw_key or not raw_id:
        logger.debug("Ignoring malformed cursor %r", cursor)
        return None
    try:
        key_value, row_id = order.codec.decode(raw_key), int(raw_id)
    except ValueError:
        logger.debug("Ignoring unparsable cursor %r", cursor)
        return None
    if not 1 <= row_id <= MAX_BIGINT:
        logger.debug("Ignoring out of range cursor %r", cursor)
        return None
    return key_value, row_id


def cursor_predicate(order: KeysetOrder, key_value: Any, row_id: int) -> ColumnElement[bool]:
    """Select rows strictly after ``(key_value, row_id)`` in ``order``.

    Expands to ``key < k OR (key = k AND id < i)``, with ``>`` when ascending.
    """
    if order.descending:
        return or_(
            order.key < key_value,
            and_(order.key == key_value, order.id < row_id),
        )
    return or_(
        order.key > key_value,
        and_(order.key == key_value, order.id > row_id),
    )


def clamp_limit(limit: int | None) -> int:
    """Apply the default page size and bound it to ``[1, MAX_PAGE_SIZE]``."""
    if limit is None:
        return settings.default_page_size
    return max(1, min(limit, settings.max_page_size))


@dataclass(frozen=True)
class PostFilters:
    """Conjunctive filters for post listings.

    ``post_type`` defaults to top-level posts; pass ``None`` to include
    responses as well.
    """

    post_type: PostType | None = PostType.POST
    city: str | None = None
    tags: Sequence[str] = field(default_factory=tuple)
    user_id: int | None = None
    parent_id: int | None = None


def filter_predicates(filters: PostFilters) -> list[ColumnElement[bool]]:
    """Translate ``filters`` into WHERE clauses; inactive posts never match."""
    predicates: list[ColumnElement[bool]] = [Post.active.is_(True)]
    if filters.post_type is not None:
        predicates.append(Post.type == filters.post_type)
    if filters.city is not None:
        predicates.append(Post.city == filters.city)
    if filters.tags:
        tagged = select(PostTag.post_id).where(PostTag.tag.in_(list(filters.tags)))
        predicates.append(Post.id.in_(tagged))
    if filters.user_id is not None:
        predicates.append(Post.user_id == filters.user_id)
    if filters.parent_id is not None:
        predicates.append(Post.parent_id == filters.parent_id)
    return predicates


@dataclass
class Page(Generic[RowT]):
    rows: list[RowT]
    has_more: bool
    next_cursor: str | None


def paginate(
    session: Session,
    stmt: Select[Any],
    order: KeysetOrder,
    *,
    cursor: str | None,
    limit: int | None,
    position_of: Callable[[Any], tuple[Any, int]],
) -> Page[Any]:
    """Run ``stmt`` as one keyset page.

    ``position_of`` maps a result row to its ``(key value, id)`` pair, which
    becomes the next cursor when more rows remain.
    """
    page_size = clamp_limit(limit)
    position = decode_cursor(order, cursor)
    if position is not None:
        stmt = stmt.where(cursor_predicate(order, *position))
    stmt = stmt.order_by(*order.order_by()).limit(page_size + 1)

    rows = list(session.execute(stmt).all())
    has_more = len(rows) > page_size
    rows = rows[:page_size]
    next_cursor = None
    if has_more and rows:
        next_cursor = encode_cursor(order, *position_of(rows[-1]))
    return Page(rows=rows, has_more=has_more, next_cursor=next_cursor)
