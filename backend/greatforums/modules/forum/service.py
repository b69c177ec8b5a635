"""
Forum Service - Post, comment and like management.

The service never commits. Multi-table writes (post creation, update and
deletion) run inside the caller's transaction, which ``get_db`` commits
once the request handler returns.
"""

from datetime import datetime
from typing import Any

from loguru import logger
from slugify import slugify
from sqlalchemy import Select, case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from greatforums.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from greatforums.models.forum import Category, Comment, Like, Post, PostCategory
from greatforums.models.user import User
from greatforums.modules.forum.schemas import CommentView, LikeCounts, PostView


def _vote_totals(target: Any) -> Select:
    """Per-target SUM(CASE ...) of likes and dislikes."""
    return (
        select(
            target.label("target_id"),
            func.sum(case((Like.is_like == True, 1), else_=0)).label("likes"),
            func.sum(case((Like.is_like == False, 1), else_=0)).label("dislikes"),
        )
        .where(target.is_not(None))
        .group_by(target)
    )


class ForumService:
    """
    Service for managing forum categories, posts, comments and likes.

    Usage:
        forum = ForumService(db_session)
        posts = await forum.get_recent_posts(limit=10)
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize forum service with database session."""
        self.db = db

    # ==================== Categories ====================

    async def get_categories(self) -> list[Category]:
        """Get all categories ordered by name."""
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get_category(self, category_id: int) -> Category | None:
        """Get category by ID."""
        return await self.db.get(Category, category_id)

    async def ensure_categories(self, names: list[str]) -> list[Category]:
        """
        Create categories that do not exist yet.

        Returns:
            Newly created categories
        """
        result = await self.db.execute(select(Category.name))
        existing = set(result.scalars().all())

        created = []
        for name in names:
            name = name.strip()
            if not name or name in existing:
                continue
            category = Category(name=name, slug=slugify(name))
            self.db.add(category)
            existing.add(name)
            created.append(category)

        if created:
            await self.db.flush()
            logger.info(f"Created categories: {', '.join(c.name for c in created)}")
        return created

    async def count_categories(self) -> int:
        """Total number of categories."""
        result = await self.db.execute(select(func.count()).select_from(Category))
        return result.scalar_one()

    async def _validate_category_ids(self, category_ids: list[int]) -> list[int]:
        """Deduplicate ids and make sure every one of them exists."""
        unique_ids = list(dict.fromkeys(category_ids))
        if not unique_ids:
            return []

        result = await self.db.execute(
            select(Category.id).where(Category.id.in_(unique_ids))
        )
        found = set(result.scalars().all())
        missing = [cid for cid in unique_ids if cid not in found]
        if missing:
            raise ValidationError(f"Unknown category ID: {missing[0]}")
        return unique_ids

    # ==================== Posts ====================

    def _post_query(self) -> Select:
        votes = _vote_totals(Like.post_id).subquery()
        return (
            select(
                Post.id,
                Post.title,
                Post.content,
                Post.user_id.label("author_id"),
                User.username.label("author"),
                Post.created_at,
                Post.updated_at,
                func.coalesce(votes.c.likes, 0).label("likes"),
                func.coalesce(votes.c.dislikes, 0).label("dislikes"),
            )
            .join(User, Post.user_id == User.id)
            .outerjoin(votes, votes.c.target_id == Post.id)
        )

    async def _category_names(self, post_ids: list[int]) -> dict[int, list[str]]:
        """Map post ID to its category names."""
        if not post_ids:
            return {}

        result = await self.db.execute(
            select(PostCategory.post_id, Category.name)
            .join(Category, PostCategory.category_id == Category.id)
            .where(PostCategory.post_id.in_(post_ids))
            .order_by(Category.name)
        )
        names: dict[int, list[str]] = {pid: [] for pid in post_ids}
        for post_id, name in result.all():
            names[post_id].append(name)
        return names

    async def get_post(self, post_id: int) -> PostView | None:
        """Get post with author, like counts and categories."""
        result = await self.db.execute(self._post_query().where(Post.id == post_id))
        row = result.mappings().one_or_none()
        if row is None:
            return None

        categories = await self.get_post_categories(post_id)
        return PostView(**row, categories=categories)

    async def get_post_categories(self, post_id: int) -> list[str]:
        """Get category names of a post."""
        names = await self._category_names([post_id])
        return names[post_id]

    async def get_recent_posts(
        self,
        limit: int = 10,
        category_id: int | None = None,
        author_id: int | None = None,
        liked_by: int | None = None,
    ) -> list[PostView]:
        """
        Get newest posts.

        Args:
            limit: Max results
            category_id: Only posts tagged with this category
            author_id: Only posts written by this user
            liked_by: Only posts this user liked

        Returns:
            List of posts, newest first
        """
        query = self._post_query()

        if category_id is not None:
            query = query.where(
                Post.id.in_(
                    select(PostCategory.post_id).where(
                        PostCategory.category_id == category_id
                    )
                )
            )

        if author_id is not None:
            query = query.where(Post.user_id == author_id)

        if liked_by is not None:
            query = query.where(
                Post.id.in_(
                    select(Like.post_id).where(
                        Like.user_id == liked_by,
                        Like.is_like == True,
                    )
                )
            )

        query = query.order_by(Post.created_at.desc(), Post.id.desc()).limit(limit)

        result = await self.db.execute(query)
        rows = result.mappings().all()
        names = await self._category_names([row["id"] for row in rows])
        return [PostView(**row, categories=names[row["id"]]) for row in rows]

    async def count_posts(self) -> int:
        """Total number of posts."""
        result = await self.db.execute(select(func.count()).select_from(Post))
        return result.scalar_one()

    async def create_post(
        self,
        user_id: int,
        title: str,
        content: str,
        category_ids: list[int] | None = None,
    ) -> Post:
        """
        Create post and tag it with categories.

        Args:
            user_id: Author user ID
            title: Post title
            content: Post body
            category_ids: Category IDs (duplicates are ignored)

        Returns:
            Created post

        Raises:
            ValidationError: Empty title/content or unknown category
        """
        title = title.strip()
        content = content.strip()
        if not title or not content:
            raise ValidationError("Title and content are required")

        category_ids = await self._validate_category_ids(category_ids or [])

        now = datetime.utcnow()
        post = Post(
            user_id=user_id,
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self.db.add(post)
        await self.db.flush()

        self.db.add_all(
            PostCategory(post_id=post.id, category_id=cid) for cid in category_ids
        )
        await self.db.flush()

        logger.info(f"User {user_id} created post {post.id}")
        return post

    async def _get_own_post(self, post_id: int, user_id: int) -> Post:
        """Fetch post, checking that user_id is its author."""
        post = await self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if post.user_id != user_id:
            raise PermissionDeniedError("You are not authorized to modify this post")
        return post

    async def update_post(
        self,
        post_id: int,
        user_id: int,
        title: str,
        content: str,
        category_ids: list[int] | None = None,
    ) -> Post:
        """
        Update post content and replace its categories.

        Raises:
            NotFoundError: Post does not exist
            PermissionDeniedError: User is not the author
            ValidationError: Empty title/content or unknown category
        """
        post = await self._get_own_post(post_id, user_id)

        title = title.strip()
        content = content.strip()
        if not title or not content:
            raise ValidationError("Title and content are required")

        category_ids = await self._validate_category_ids(category_ids or [])

        post.title = title
        post.content = content
        post.updated_at = datetime.utcnow()

        await self.db.execute(
            delete(PostCategory).where(PostCategory.post_id == post_id)
        )
        self.db.add_all(
            PostCategory(post_id=post_id, category_id=cid) for cid in category_ids
        )
        await self.db.flush()

        logger.info(f"User {user_id} updated post {post_id}")
        return post

    async def delete_post(self, post_id: int, user_id: int) -> None:
        """
        Delete post with its categories, comments and likes.

        Raises:
            NotFoundError: Post does not exist
            PermissionDeniedError: User is not the author
        """
        await self._get_own_post(post_id, user_id)

        comment_ids = select(Comment.id).where(Comment.post_id == post_id)

        for statement in (
            delete(PostCategory).where(PostCategory.post_id == post_id),
            delete(Like).where(Like.post_id == post_id),
            delete(Like).where(Like.comment_id.in_(comment_ids)),
            delete(Comment).where(Comment.post_id == post_id),
        ):
            await self.db.execute(statement)

        await self.db.execute(delete(Post).where(Post.id == post_id))
        await self.db.flush()

        logger.info(f"User {user_id} deleted post {post_id}")

    # ==================== Comments ====================

    async def add_comment(self, user_id: int, post_id: int, content: str) -> Comment:
        """
        Add comment to post.

        Raises:
            ValidationError: Empty content
            NotFoundError: Post does not exist
        """
        content = content.strip()
        if not content:
            raise ValidationError("Comment content cannot be empty")

        if await self.db.get(Post, post_id) is None:
            raise NotFoundError("Post not found")

        comment = Comment(user_id=user_id, post_id=post_id, content=content)
        self.db.add(comment)
        await self.db.flush()

        logger.info(f"User {user_id} commented on post {post_id}")
        return comment

    async def get_comments(self, post_id: int) -> list[CommentView]:
        """Get comments of a post, oldest first, with like counts."""
        votes = _vote_totals(Like.comment_id).subquery()
        query = (
            select(
                Comment.id,
                Comment.post_id,
                Comment.content,
                Comment.user_id.label("author_id"),
                User.username.label("author"),
                Comment.created_at,
                func.coalesce(votes.c.likes, 0).label("likes"),
                func.coalesce(votes.c.dislikes, 0).label("dislikes"),
            )
            .join(User, Comment.user_id == User.id)
            .outerjoin(votes, votes.c.target_id == Comment.id)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
        )
        result = await self.db.execute(query)
        return [CommentView(**row) for row in result.mappings().all()]

    async def get_post_id_for_comment(self, comment_id: int) -> int | None:
        """Get ID of the post a comment belongs to."""
        result = await self.db.execute(
            select(Comment.post_id).where(Comment.id == comment_id)
        )
        return result.scalar_one_or_none()

    # ==================== Likes ====================

    async def _ensure_target(self, target_id: int, on_post: bool) -> None:
        model = Post if on_post else Comment
        if await self.db.get(model, target_id) is None:
            raise NotFoundError(f"{'Post' if on_post else 'Comment'} not found")

    def _target_column(self, on_post: bool) -> Any:
        return Like.post_id if on_post else Like.comment_id

    async def upsert_like(
        self,
        user_id: int,
        target_id: int,
        is_like: bool,
        on_post: bool = True,
    ) -> Like:
        """
        Record user's like or dislike on a post or comment.

        A user has at most one vote per target; voting again replaces it.

        Args:
            user_id: Voting user ID
            target_id: Post ID or comment ID
            is_like: True for like, False for dislike
            on_post: Whether target_id is a post (else a comment)

        Raises:
            NotFoundError: Target does not exist
        """
        await self._ensure_target(target_id, on_post)

        column = self._target_column(on_post)
        result = await self.db.execute(
            select(Like).where(Like.user_id == user_id, column == target_id)
        )
        like = result.scalar_one_or_none()

        if like is None:
            like = Like(user_id=user_id, is_like=is_like)
            if on_post:
                like.post_id = target_id
            else:
                like.comment_id = target_id
            self.db.add(like)
        else:
            like.is_like = is_like

        await self.db.flush()
        return like

    async def remove_like(
        self,
        user_id: int,
        target_id: int,
        on_post: bool = True,
    ) -> bool:
        """Remove user's vote from a post or comment."""
        column = self._target_column(on_post)
        result = await self.db.execute(
            delete(Like).where(Like.user_id == user_id, column == target_id)
        )
        return result.rowcount > 0

    async def get_like_counts(self, target_id: int, on_post: bool = True) -> LikeCounts:
        """Get like and dislike totals of a post or comment."""
        column = self._target_column(on_post)
        result = await self.db.execute(
            _vote_totals(column).where(column == target_id)
        )
        row = result.mappings().one_or_none()
        if row is None:
            return LikeCounts()
        return LikeCounts(likes=row["likes"], dislikes=row["dislikes"])
