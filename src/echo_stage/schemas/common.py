"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel


class Success(BaseModel):
    """Acknowledgement returned by mutations without a richer payload."""

    success: bool = True
