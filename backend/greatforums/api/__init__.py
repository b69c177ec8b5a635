"""
Page Router.

Combines all page endpoints.
"""

from fastapi import APIRouter

from greatforums.api.endpoints import auth, comments, home, posts

router = APIRouter()

# Include endpoint routers
router.include_router(home.router, tags=["Home"])
router.include_router(auth.router, tags=["Auth"])
router.include_router(posts.router, tags=["Posts"])
router.include_router(comments.router, tags=["Comments"])
