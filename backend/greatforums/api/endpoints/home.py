"""
Home page.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response

from greatforums.api.deps import get_current_user, get_forum_service
from greatforums.api.templating import render
from greatforums.core.config import settings
from greatforums.models.user import User
from greatforums.modules.forum.service import ForumService

router = APIRouter()


@router.get("/")
async def home(
    request: Request,
    category: int | None = Query(None, description="Category ID"),
    mine: bool = Query(False, description="Only my posts"),
    liked: bool = Query(False, description="Only posts I liked"),
    user: User | None = Depends(get_current_user),
    forum: ForumService = Depends(get_forum_service),
) -> Response:
    """Recent posts, categories and forum stats."""
    if (mine or liked) and user is None:
        return RedirectResponse("/login", status_code=303)

    posts = await forum.get_recent_posts(
        limit=settings.home_recent_posts,
        category_id=category,
        author_id=user.id if mine else None,
        liked_by=user.id if liked else None,
    )
    categories = await forum.get_categories()

    return render(
        request,
        "home.html",
        {
            "user": user,
            "recent_posts": posts,
            "categories": categories,
            "selected_category": category,
            "post_count": await forum.count_posts(),
            "category_count": len(categories),
        },
    )
