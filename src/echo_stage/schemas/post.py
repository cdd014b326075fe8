"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from echo_stage.core.settings import settings
from echo_stage.models.post import PostStatus, PostType


class AuthorOut(BaseModel):
    """Denormalized author profile attached to every post projection."""

    id: int
    user_id: int
    username: str
    city: str

    model_config = ConfigDict(from_attributes=True)


class PostSummary(BaseModel):
    """Post projection used in lists (no audio URL)."""

    id: int
    user_id: int
    author: AuthorOut
    type: PostType
    status: PostStatus
    parent_id: int | None = None
    duration: int
    tags: list[str] = Field(default_factory=list)
    waveform_url: str | None = None
    response_count: int
    bookmark_count: int
    is_bookmarked: bool = False
    created_at: datetime


class PostDetail(PostSummary):
    """Full post projection including the audio URL and city."""

    audio_url: str | None = None
    city: str


class PostPage(BaseModel):
    """One page of a keyset-paginated feed."""

    items: list[PostSummary]
    has_more: bool
    next_cursor: str | None = None


def _clean_tags(value: list[str] | None) -> list[str]:
    tags = sorted({tag.strip() for tag in (value or []) if tag and tag.strip()})
    if len(tags) > settings.max_tags_per_post:
        raise ValueError(f"At most {settings.max_tags_per_post} tags are allowed")
    for tag in tags:
        if len(tag) > settings.max_tag_length:
            raise ValueError(f"Tag '{tag[:16]}...' exceeds {settings.max_tag_length} characters")
    return tags


class PostCreate(BaseModel):
    """Schema for creating a new top-level post."""

    audio_key: str = Field(..., min_length=1, description="Storage key of the uploaded audio")
    duration: PositiveInt = Field(..., description="Audio length in seconds")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return _clean_tags(value)


class ResponseCreate(PostCreate):
    """Schema for responding to an existing post."""


class WaveformUpdate(BaseModel):
    """Worker payload announcing a rendered waveform."""

    waveform_url: str = Field(..., min_length=1)


class StatusUpdate(BaseModel):
    """Worker payload moving a post through its processing lifecycle."""

    status: PostStatus
