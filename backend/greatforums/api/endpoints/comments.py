"""
Comment and Like Endpoints.

Comments redirect back to the post page; like endpoints answer with the
updated totals as JSON for in-page updates.
"""

from fastapi import APIRouter, Depends, Form
from fastapi.responses import ORJSONResponse, RedirectResponse, Response

from greatforums.api.deps import (
    get_forum_service,
    parse_bool,
    parse_id,
    require_user,
)
from greatforums.models.user import User
from greatforums.modules.forum.service import ForumService

router = APIRouter()


@router.post("/comment")
async def add_comment(
    post_id: str = Form(""),
    content: str = Form(""),
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Add comment and return to the post."""
    pid = parse_id(post_id, "post")
    await forum.add_comment(user.id, pid, content)
    return RedirectResponse(f"/post/{pid}", status_code=303)


# ==================== Likes ====================


async def _vote(
    forum: ForumService,
    user: User,
    target_id: int,
    is_like: bool,
    on_post: bool,
) -> ORJSONResponse:
    await forum.upsert_like(user.id, target_id, is_like, on_post=on_post)
    counts = await forum.get_like_counts(target_id, on_post=on_post)
    return ORJSONResponse(counts.model_dump())


async def _unvote(
    forum: ForumService,
    user: User,
    target_id: int,
    on_post: bool,
) -> ORJSONResponse:
    await forum.remove_like(user.id, target_id, on_post=on_post)
    counts = await forum.get_like_counts(target_id, on_post=on_post)
    return ORJSONResponse(counts.model_dump())


@router.post("/like-post")
async def like_post(
    post_id: str = Form(""),
    is_like: str = Form(""),
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> ORJSONResponse:
    """Like or dislike a post."""
    return await _vote(
        forum, user, parse_id(post_id, "post"), parse_bool(is_like), on_post=True
    )


@router.post("/like-comment")
async def like_comment(
    comment_id: str = Form(""),
    is_like: str = Form(""),
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> ORJSONResponse:
    """Like or dislike a comment."""
    return await _vote(
        forum,
        user,
        parse_id(comment_id, "comment"),
        parse_bool(is_like),
        on_post=False,
    )


@router.post("/unlike-post")
async def unlike_post(
    post_id: str = Form(""),
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> ORJSONResponse:
    """Remove vote from a post."""
    return await _unvote(forum, user, parse_id(post_id, "post"), on_post=True)


@router.post("/unlike-comment")
async def unlike_comment(
    comment_id: str = Form(""),
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> ORJSONResponse:
    """Remove vote from a comment."""
    return await _unvote(
        forum, user, parse_id(comment_id, "comment"), on_post=False
    )
