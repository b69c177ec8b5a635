"""
Post Endpoints.

Create, view, edit and delete posts.
"""

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse, Response

from greatforums.api.deps import (
    get_current_user,
    get_forum_service,
    parse_id,
    require_user,
)
from greatforums.api.templating import render
from greatforums.models.user import User
from greatforums.modules.forum.service import ForumService

router = APIRouter()


def _category_ids(values: list[str]) -> list[int]:
    return [parse_id(value, "category") for value in values]


@router.get("/create-post")
async def create_post_form(
    request: Request,
    user: User | None = Depends(get_current_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Show post form; anonymous users are sent to login."""
    if user is None:
        return RedirectResponse("/login", status_code=303)

    return render(
        request,
        "create-post.html",
        {"user": user, "categories": await forum.get_categories()},
    )


@router.post("/create-post")
async def create_post(
    title: str = Form(""),
    content: str = Form(""),
    categories: list[str] = Form([]),
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Create post and redirect to it."""
    post = await forum.create_post(
        user_id=user.id,
        title=title,
        content=content,
        category_ids=_category_ids(categories),
    )
    return RedirectResponse(f"/post/{post.id}", status_code=303)


@router.get("/post/{post_id}")
async def view_post(
    request: Request,
    post_id: int,
    user: User | None = Depends(get_current_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Show post with its comments."""
    post = await forum.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")

    comments = await forum.get_comments(post_id)

    return render(
        request,
        "view-post.html",
        {
            "user": user,
            "post": post,
            "categories": post.categories,
            "comments": comments,
            "is_author": user is not None and user.id == post.author_id,
        },
    )


@router.get("/edit-post/{post_id}")
async def edit_post_form(
    request: Request,
    post_id: int,
    user: User | None = Depends(get_current_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Show edit form to the post's author."""
    if user is None:
        return RedirectResponse("/login", status_code=303)

    post = await forum.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.author_id != user.id:
        raise HTTPException(
            status_code=403, detail="You are not authorized to edit this post"
        )

    return render(
        request,
        "edit-post.html",
        {
            "user": user,
            "post": post,
            "categories": await forum.get_categories(),
        },
    )


@router.post("/edit-post/{post_id}")
async def edit_post(
    post_id: int,
    title: str = Form(""),
    content: str = Form(""),
    categories: list[str] = Form([]),
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Update post and redirect to it."""
    await forum.update_post(
        post_id=post_id,
        user_id=user.id,
        title=title,
        content=content,
        category_ids=_category_ids(categories),
    )
    return RedirectResponse(f"/post/{post_id}", status_code=303)


@router.post("/delete-post/{post_id}")
async def delete_post(
    post_id: int,
    user: User = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Delete post (author only) and return home."""
    await forum.delete_post(post_id, user.id)
    return RedirectResponse("/", status_code=303)
