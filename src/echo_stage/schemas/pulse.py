"""Pulse statistics schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PulseTagStat(BaseModel):
    tag: str
    count: int
    percentage: float

    model_config = ConfigDict(from_attributes=True)


class PulseStats(BaseModel):
    """Tag popularity for one city over one period."""

    city: str
    period: str
    tags: list[PulseTagStat]
