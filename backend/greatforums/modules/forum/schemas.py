"""
Read models returned by the forum service.
"""

from datetime import datetime

from pydantic import BaseModel


def format_timestamp(value: datetime) -> str:
    """Format as e.g. 'January 2, 2006 at 3:04 PM'."""
    hour = value.hour % 12 or 12
    return f"{value:%B} {value.day}, {value.year} at {hour}:{value:%M %p}"


class LikeCounts(BaseModel):
    """Like/dislike totals for one post or comment."""

    likes: int = 0
    dislikes: int = 0


class PostView(BaseModel):
    """Post with author name, vote totals and category names."""

    id: int
    title: str
    content: str
    author_id: int
    author: str
    created_at: datetime
    updated_at: datetime
    likes: int = 0
    dislikes: int = 0
    categories: list[str] = []

    @property
    def formatted_created_at(self) -> str:
        return format_timestamp(self.created_at)

    @property
    def is_edited(self) -> bool:
        return self.updated_at > self.created_at


class CommentView(BaseModel):
    """Comment with author name and vote totals."""

    id: int
    post_id: int
    content: str
    author_id: int
    author: str
    created_at: datetime
    likes: int = 0
    dislikes: int = 0

    @property
    def formatted_created_at(self) -> str:
        return format_timestamp(self.created_at)
