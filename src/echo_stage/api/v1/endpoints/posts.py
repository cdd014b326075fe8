# src/echo_stage/api/v1/endpoints/posts.py
"""Post and response endpoints for the Echo API."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from echo_stage.api.v1.dependencies import ContextDep, SessionDep, ViewerDep
from echo_stage.models.post import PostType
from echo_stage.schemas.common import Success
from echo_stage.schemas.post import PostCreate, PostDetail, PostPage, ResponseCreate
from echo_stage.services import post_service
from echo_stage.services.pagination import SortBy

router = APIRouter(prefix="/posts", tags=["posts"])

SortQuery = Annotated[SortBy, Query(description="Feed ordering")]
CursorQuery = Annotated[str | None, Query(description="Opaque cursor from a previous page")]
LimitQuery = Annotated[int | None, Query(description="Page size, clamped to the configured maximum")]


@router.get("", response_model=PostPage)
def list_feed(
    db: SessionDep,
    ctx: ContextDep,
    city: Annotated[str | None, Query()] = None,
    tags: Annotated[list[str] | None, Query()] = None,
    sort_by: SortQuery = SortBy.NEWEST,
    cursor: CursorQuery = None,
    limit: LimitQuery = None,
) -> PostPage:
    """List active top-level posts, optionally by city and any of the tags."""
    return post_service.home_feed(
        db,
        city=city,
        tags=tags or (),
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
        viewer_id=ctx.viewer_id,
    )


@router.get("/mine", response_model=PostPage)
def list_my_posts(
    db: SessionDep,
    ctx: ViewerDep,
    post_type: Annotated[PostType, Query(alias="type")] = PostType.POST,
    sort_by: SortQuery = SortBy.NEWEST,
    cursor: CursorQuery = None,
    limit: LimitQuery = None,
) -> PostPage:
    """List the caller's own posts or responses."""
    viewer_id = ctx.require_viewer()
    return post_service.posts_by_user(
        db,
        viewer_id,
        post_type=post_type,
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
        viewer_id=viewer_id,
    )


@router.get("/{post_id}", response_model=PostDetail)
def get_post(post_id: int, db: SessionDep, ctx: ContextDep) -> PostDetail:
    """Return one active post with its audio URL."""
    post = post_service.get_post_by_id(db, post_id, ctx.viewer_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.get("/{post_id}/responses", response_model=PostPage)
def list_responses(
    post_id: int,
    db: SessionDep,
    ctx: ContextDep,
    sort_by: SortQuery = SortBy.NEWEST,
    cursor: CursorQuery = None,
    limit: LimitQuery = None,
) -> PostPage:
    """List active responses to a post."""
    return post_service.responses_to(
        db,
        post_id,
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
        viewer_id=ctx.viewer_id,
    )


@router.post("", response_model=PostDetail, status_code=status.HTTP_201_CREATED)
def create_post(payload: PostCreate, db: SessionDep, ctx: ViewerDep) -> PostDetail:
    """Publish an uploaded audio clip as a new post in the author's city."""
    return post_service.create_post(
        db,
        user_id=ctx.require_viewer(),
        audio=post_service.audio_locator_for_key(payload.audio_key),
        duration=payload.duration,
        tags=payload.tags,
    )


@router.post(
    "/{post_id}/responses",
    response_model=PostDetail,
    status_code=status.HTTP_201_CREATED,
)
def create_response(
    post_id: int,
    payload: ResponseCreate,
    db: SessionDep,
    ctx: ViewerDep,
) -> PostDetail:
    """Respond to an active post."""
    return post_service.create_response(
        db,
        user_id=ctx.require_viewer(),
        parent_id=post_id,
        audio=post_service.audio_locator_for_key(payload.audio_key),
        duration=payload.duration,
        tags=payload.tags,
    )


@router.delete("/{post_id}", response_model=Success)
def delete_post(post_id: int, db: SessionDep, ctx: ViewerDep) -> Success:
    """Remove one of the caller's posts or responses."""
    post_service.delete_post(db, post_id, ctx.require_viewer())
    return Success()
