"""
Shared request dependencies.
"""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from greatforums.core.config import settings
from greatforums.core.database import get_db
from greatforums.models.user import User
from greatforums.modules.auth.service import AuthService
from greatforums.modules.forum.service import ForumService

TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def get_auth_service(
    db: AsyncSession = Depends(get_db, scope="function"),
) -> AuthService:
    return AuthService(db)


def get_forum_service(
    db: AsyncSession = Depends(get_db, scope="function"),
) -> ForumService:
    return ForumService(db)


async def get_current_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User | None:
    """Return logged-in user from the session cookie, or None."""
    token = request.cookies.get(settings.session_cookie_name)
    return await auth.get_user_by_token(token)


async def require_user(user: User | None = Depends(get_current_user)) -> User:
    """Return logged-in user or raise 401."""
    if user is None:
        raise HTTPException(status_code=401, detail="You must be logged in")
    return user


def parse_bool(value: str) -> bool:
    """Parse a form boolean ('true', '0', 'T', ...); raise 400 otherwise."""
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise HTTPException(status_code=400, detail="Invalid like value")


def parse_id(value: str, label: str) -> int:
    """Parse a numeric ID from form input; raise 400 otherwise."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID") from None
