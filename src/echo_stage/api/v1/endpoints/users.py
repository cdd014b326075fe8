# src/echo_stage/api/v1/endpoints/users.py
"""Per-user feed endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from echo_stage.api.v1.dependencies import ContextDep, SessionDep
from echo_stage.models.post import PostType
from echo_stage.schemas.post import PostPage
from echo_stage.services import post_service
from echo_stage.services.pagination import SortBy

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/posts", response_model=PostPage)
def list_user_posts(
    user_id: int,
    db: SessionDep,
    ctx: ContextDep,
    post_type: Annotated[PostType, Query(alias="type")] = PostType.POST,
    sort_by: Annotated[SortBy, Query()] = SortBy.NEWEST,
    cursor: Annotated[str | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
) -> PostPage:
    return post_service.posts_by_user(
        db,
        user_id,
        post_type=post_type,
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
        viewer_id=ctx.viewer_id,
    )
