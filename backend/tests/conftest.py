"""
pytest configuration and fixtures.
"""

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

# Point the application at a throwaway database before it is imported
_DB_FILE = Path(tempfile.mkdtemp(prefix="greatforums-")) / "forum.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from greatforums import models  # noqa: F401
from greatforums.core.database import Base, create_engine
from greatforums.main import app
from greatforums.models.forum import Category
from greatforums.models.user import User
from greatforums.modules.auth.service import AuthService
from greatforums.modules.forum.service import ForumService

PASSWORD = "correct-horse"


@pytest.fixture
async def db(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh SQLite database."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def auth(db: AsyncSession) -> AuthService:
    return AuthService(db)


@pytest.fixture
def forum(db: AsyncSession) -> ForumService:
    return ForumService(db)


@pytest.fixture
async def alice(auth: AuthService) -> User:
    return await auth.register("alice", "alice@example.com", PASSWORD)


@pytest.fixture
async def bob(auth: AuthService) -> User:
    return await auth.register("bob", "bob@example.com", PASSWORD)


@pytest.fixture
async def categories(forum: ForumService) -> list[Category]:
    """General, Sports and Technology, in name order."""
    await forum.ensure_categories(["General", "Technology", "Sports"])
    return await forum.get_categories()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client on an empty database, seeded by the app lifespan."""
    _DB_FILE.unlink(missing_ok=True)
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client: TestClient, username: str) -> None:
    """Create an account and log the client in."""
    client.post(
        "/register",
        data={
            "username": username,
            "email": f"{username}@example.com",
            "password": PASSWORD,
        },
    )
    response = client.post(
        "/login",
        data={"username": username, "password": PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
