"""Scoped transaction helper used by multi-step writes."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Run the enclosed block as one atomic unit.

    Commits when the block exits normally and rolls back when it raises.
    If the session already has a transaction in progress (for example a read
    earlier in the same request), the block runs in a SAVEPOINT instead, so
    a failure still discards every write made inside it. The outer
    transaction is then committed by whoever owns the session.
    """
    if session.in_transaction():
        with session.begin_nested():
            yield session
    else:
        with session.begin():
            yield session
