"""
Tests for ForumService: categories, posts, comments and likes.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from greatforums.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from greatforums.models.forum import Category, Comment, Like, PostCategory
from greatforums.models.user import User
from greatforums.modules.forum import service as forum_service
from greatforums.modules.forum.schemas import format_timestamp
from greatforums.modules.forum.service import ForumService


async def _count(db: AsyncSession, model: type) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


# ==================== Categories ====================


async def test_ensure_categories_is_idempotent(forum: ForumService) -> None:
    created = await forum.ensure_categories(["General", "Off Topic", "General"])
    again = await forum.ensure_categories(["General", "Off Topic"])

    assert [c.name for c in created] == ["General", "Off Topic"]
    assert again == []
    assert await forum.count_categories() == 2

    off_topic = created[1]
    assert off_topic.slug == "off-topic"
    assert (await forum.get_category(off_topic.id)).name == "Off Topic"


# ==================== Posts ====================


async def test_create_post_with_categories(
    forum: ForumService, alice: User, categories: list[Category]
) -> None:
    general, sports, _ = categories
    post = await forum.create_post(
        alice.id, " Hello ", "First post", [sports.id, general.id, sports.id]
    )

    view = await forum.get_post(post.id)
    assert view is not None
    assert view.title == "Hello"
    assert view.author == "alice"
    assert view.author_id == alice.id
    assert view.categories == ["General", "Sports"]
    assert view.likes == 0
    assert view.dislikes == 0
    assert not view.is_edited


async def test_create_post_without_categories(
    forum: ForumService, alice: User
) -> None:
    post = await forum.create_post(alice.id, "Plain", "No tags")
    assert (await forum.get_post_categories(post.id)) == []


@pytest.mark.parametrize("title, content", [("", "body"), ("title", "   ")])
async def test_create_post_requires_title_and_content(
    forum: ForumService, alice: User, title: str, content: str
) -> None:
    with pytest.raises(ValidationError):
        await forum.create_post(alice.id, title, content)


async def test_create_post_with_unknown_category_writes_nothing(
    db: AsyncSession, forum: ForumService, alice: User, categories: list[Category]
) -> None:
    with pytest.raises(ValidationError, match="Unknown category ID: 999"):
        await forum.create_post(alice.id, "Title", "Body", [categories[0].id, 999])

    assert await forum.count_posts() == 0
    assert await _count(db, PostCategory) == 0


async def test_failed_category_link_leaves_no_rows(
    db: AsyncSession,
    forum: ForumService,
    alice: User,
    categories: list[Category],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    await db.commit()

    def broken_link(**kwargs):
        raise RuntimeError("post_categories insert failed")

    monkeypatch.setattr(forum_service, "PostCategory", broken_link)
    with pytest.raises(RuntimeError):
        await forum.create_post(alice.id, "Title", "Body", [categories[0].id])
    await db.rollback()

    assert await forum.count_posts() == 0
    assert await _count(db, PostCategory) == 0
    assert await forum.count_categories() == 3


async def test_get_missing_post(forum: ForumService) -> None:
    assert await forum.get_post(12345) is None


async def test_recent_posts_newest_first_with_limit(
    forum: ForumService, alice: User
) -> None:
    ids = [
        (await forum.create_post(alice.id, f"Post {i}", "Body")).id for i in range(4)
    ]

    posts = await forum.get_recent_posts(limit=3)

    assert [p.id for p in posts] == list(reversed(ids))[:3]
    assert await forum.count_posts() == 4


async def test_recent_posts_filters(
    forum: ForumService, alice: User, bob: User, categories: list[Category]
) -> None:
    general, sports, _ = categories
    football = await forum.create_post(alice.id, "Football", "Body", [sports.id])
    news = await forum.create_post(bob.id, "News", "Body", [general.id])
    await forum.create_post(bob.id, "Misc", "Body")
    await forum.upsert_like(alice.id, news.id, True)
    await forum.upsert_like(alice.id, football.id, False)

    by_category = await forum.get_recent_posts(category_id=sports.id)
    by_author = await forum.get_recent_posts(author_id=alice.id)
    liked = await forum.get_recent_posts(liked_by=alice.id)

    assert [p.title for p in by_category] == ["Football"]
    assert [p.title for p in by_author] == ["Football"]
    assert [p.title for p in liked] == ["News"]


async def test_update_post_replaces_categories(
    forum: ForumService, alice: User, categories: list[Category]
) -> None:
    general, sports, technology = categories
    post = await forum.create_post(alice.id, "Old", "Old body", [general.id])

    await forum.update_post(
        post.id, alice.id, "New", "New body", [sports.id, technology.id]
    )

    view = await forum.get_post(post.id)
    assert view.title == "New"
    assert view.content == "New body"
    assert view.categories == ["Sports", "Technology"]
    assert view.is_edited


async def test_update_post_by_other_user_is_denied(
    forum: ForumService, alice: User, bob: User
) -> None:
    post = await forum.create_post(alice.id, "Mine", "Body")

    with pytest.raises(PermissionDeniedError):
        await forum.update_post(post.id, bob.id, "Hijacked", "Body")
    with pytest.raises(NotFoundError):
        await forum.update_post(999, alice.id, "Title", "Body")


async def test_delete_post_removes_dependent_rows(
    db: AsyncSession,
    forum: ForumService,
    alice: User,
    bob: User,
    categories: list[Category],
) -> None:
    doomed = await forum.create_post(alice.id, "Doomed", "Body", [categories[0].id])
    kept = await forum.create_post(alice.id, "Kept", "Body", [categories[0].id])
    comment = await forum.add_comment(bob.id, doomed.id, "Nice")
    kept_comment = await forum.add_comment(bob.id, kept.id, "Also nice")
    await forum.upsert_like(bob.id, doomed.id, True)
    await forum.upsert_like(alice.id, comment.id, True, on_post=False)
    await forum.upsert_like(alice.id, kept_comment.id, False, on_post=False)

    await forum.delete_post(doomed.id, alice.id)

    assert await forum.get_post(doomed.id) is None
    assert await forum.get_post(kept.id) is not None
    assert await _count(db, PostCategory) == 1
    assert await _count(db, Comment) == 1
    assert await _count(db, Like) == 1
    assert await forum.get_post_id_for_comment(comment.id) is None


async def test_delete_post_checks_author(
    forum: ForumService, alice: User, bob: User
) -> None:
    post = await forum.create_post(alice.id, "Mine", "Body")

    with pytest.raises(PermissionDeniedError):
        await forum.delete_post(post.id, bob.id)
    with pytest.raises(NotFoundError):
        await forum.delete_post(999, alice.id)

    assert await forum.get_post(post.id) is not None


# ==================== Comments ====================


async def test_comments_oldest_first_with_counts(
    forum: ForumService, alice: User, bob: User
) -> None:
    post = await forum.create_post(alice.id, "Topic", "Body")
    first = await forum.add_comment(bob.id, post.id, "First")
    second = await forum.add_comment(alice.id, post.id, " Second ")
    await forum.upsert_like(alice.id, first.id, True, on_post=False)
    await forum.upsert_like(bob.id, first.id, False, on_post=False)

    comments = await forum.get_comments(post.id)

    assert [c.id for c in comments] == [first.id, second.id]
    assert comments[0].author == "bob"
    assert (comments[0].likes, comments[0].dislikes) == (1, 1)
    assert comments[1].content == "Second"
    assert (comments[1].likes, comments[1].dislikes) == (0, 0)
    assert await forum.get_post_id_for_comment(second.id) == post.id


async def test_add_comment_validation(forum: ForumService, alice: User) -> None:
    post = await forum.create_post(alice.id, "Topic", "Body")

    with pytest.raises(ValidationError):
        await forum.add_comment(alice.id, post.id, "  ")
    with pytest.raises(NotFoundError):
        await forum.add_comment(alice.id, 999, "Hello")


# ==================== Likes ====================


async def test_second_vote_replaces_first(
    db: AsyncSession, forum: ForumService, alice: User, bob: User
) -> None:
    post = await forum.create_post(alice.id, "Topic", "Body")

    await forum.upsert_like(alice.id, post.id, True)
    await forum.upsert_like(bob.id, post.id, True)
    counts = await forum.get_like_counts(post.id)
    assert (counts.likes, counts.dislikes) == (2, 0)

    await forum.upsert_like(bob.id, post.id, False)
    await forum.upsert_like(bob.id, post.id, False)
    counts = await forum.get_like_counts(post.id)
    assert (counts.likes, counts.dislikes) == (1, 1)
    assert await _count(db, Like) == 2

    view = await forum.get_post(post.id)
    assert (view.likes, view.dislikes) == (1, 1)


async def test_post_and_comment_votes_are_separate(
    forum: ForumService, alice: User
) -> None:
    post = await forum.create_post(alice.id, "Topic", "Body")
    comment = await forum.add_comment(alice.id, post.id, "Comment")

    await forum.upsert_like(alice.id, post.id, True)
    await forum.upsert_like(alice.id, comment.id, False, on_post=False)

    post_counts = await forum.get_like_counts(post.id)
    comment_counts = await forum.get_like_counts(comment.id, on_post=False)
    assert (post_counts.likes, post_counts.dislikes) == (1, 0)
    assert (comment_counts.likes, comment_counts.dislikes) == (0, 1)


async def test_remove_like(forum: ForumService, alice: User) -> None:
    post = await forum.create_post(alice.id, "Topic", "Body")
    await forum.upsert_like(alice.id, post.id, True)

    assert await forum.remove_like(alice.id, post.id) is True
    assert await forum.remove_like(alice.id, post.id) is False
    counts = await forum.get_like_counts(post.id)
    assert (counts.likes, counts.dislikes) == (0, 0)


async def test_vote_on_missing_target(forum: ForumService, alice: User) -> None:
    with pytest.raises(NotFoundError):
        await forum.upsert_like(alice.id, 999, True)
    with pytest.raises(NotFoundError, match="Comment not found"):
        await forum.upsert_like(alice.id, 999, True, on_post=False)


def test_format_timestamp() -> None:
    from datetime import datetime

    assert format_timestamp(datetime(2006, 1, 2, 15, 4)) == "January 2, 2006 at 3:04 PM"
    assert format_timestamp(datetime(2024, 7, 9, 0, 30)) == "July 9, 2024 at 12:30 AM"
