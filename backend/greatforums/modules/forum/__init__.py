"""
Forum Module - Community discussions.

Features:
- Categories
- Posts tagged with categories
- Comments
- Likes and dislikes on posts and comments
"""

from greatforums.modules.forum.service import ForumService

__all__ = ["ForumService"]
