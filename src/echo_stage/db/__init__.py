# src/echo_stage/db/__init__.py
"""Database configuration and utilities."""

from .session import SessionLocal, get_db
from .transaction import transaction

__all__ = ["get_db", "SessionLocal", "transaction"]
