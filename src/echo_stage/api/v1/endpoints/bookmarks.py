# src/echo_stage/api/v1/endpoints/bookmarks.py
"""Bookmark endpoints for the Echo API."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from echo_stage.api.v1.dependencies import SessionDep, ViewerDep
from echo_stage.schemas.common import Success
from echo_stage.schemas.post import PostPage
from echo_stage.services import bookmark_service
from echo_stage.services.pagination import SortBy

router = APIRouter(tags=["bookmarks"])


@router.post(
    "/posts/{post_id}/bookmark",
    response_model=Success,
    status_code=status.HTTP_201_CREATED,
)
def add_bookmark(post_id: int, db: SessionDep, ctx: ViewerDep) -> Success:
    """Save a post to the caller's bookmarks; 409 if already saved."""
    bookmark_service.bookmark(db, ctx.require_viewer(), post_id)
    return Success()


@router.delete("/posts/{post_id}/bookmark", response_model=Success)
def delete_bookmark(post_id: int, db: SessionDep, ctx: ViewerDep) -> Success:
    bookmark_service.remove_bookmark(db, ctx.require_viewer(), post_id)
    return Success()


@router.get("/bookmarks", response_model=PostPage)
def list_bookmarks(
    db: SessionDep,
    ctx: ViewerDep,
    sort_by: Annotated[SortBy, Query()] = SortBy.NEWEST,
    cursor: Annotated[str | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
) -> PostPage:
    """List the caller's saved posts by bookmark time."""
    return bookmark_service.list_bookmarked_posts(
        db,
        ctx.require_viewer(),
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
    )
