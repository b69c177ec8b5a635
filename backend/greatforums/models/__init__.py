"""
Database models.
"""

from greatforums.models.forum import Category, Comment, Like, Post, PostCategory
from greatforums.models.user import User, UserSession

__all__ = [
    "Category",
    "Comment",
    "Like",
    "Post",
    "PostCategory",
    "User",
    "UserSession",
]
