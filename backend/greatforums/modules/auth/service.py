"""
Auth Service - Registration, login and session management.
"""

import re
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from greatforums.core.config import settings
from greatforums.core.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    ValidationError,
)
from greatforums.core.security import (
    generate_session_token,
    hash_password,
    verify_password,
)
from greatforums.models.user import User, UserSession

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


class AuthService:
    """
    Service for user accounts and login sessions.

    Usage:
        auth = AuthService(db_session)
        user = await auth.authenticate("alice", "secret")
        session = await auth.create_session(user)
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize auth service with database session."""
        self.db = db

    # ==================== Accounts ====================

    async def register(self, username: str, email: str, password: str) -> User:
        """
        Create new user account.

        Args:
            username: Unique display name
            email: Unique email address
            password: Plain-text password, stored as a bcrypt hash

        Returns:
            Created user

        Raises:
            ValidationError: Missing or malformed field
            AlreadyExistsError: Username or email already taken
        """
        username = username.strip()
        email = email.strip().lower()

        if not username or not email or not password:
            raise ValidationError("All fields are required")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email address")
        if len(password) < settings.password_min_length:
            raise ValidationError(
                f"Password must be at least {settings.password_min_length} characters"
            )
        if len(password.encode("utf-8")) > settings.password_max_bytes:
            raise ValidationError(
                f"Password must be at most {settings.password_max_bytes} bytes"
            )

        existing = await self.db.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing.first() is not None:
            raise AlreadyExistsError("Username or email already exists")

        user = User(username=username, email=email, password=hash_password(password))
        self.db.add(user)
        await self.db.flush()

        logger.info(f"Registered user {user.username} (id={user.id})")
        return user

    async def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        """Get user by username."""
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def authenticate(self, username: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            ValidationError: Missing username or password
            InvalidCredentialsError: Unknown user or wrong password
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = await self.get_user_by_username(username.strip())
        if user is None or not verify_password(password, user.password):
            logger.warning(f"Failed login for username {username!r}")
            raise InvalidCredentialsError("Invalid username or password")

        return user

    # ==================== Sessions ====================

    async def create_session(self, user: User) -> UserSession:
        """
        Start a new login session for user.

        Earlier sessions of the same user are dropped, so a user is
        logged in from at most one place.
        """
        await self.db.execute(delete(UserSession).where(UserSession.user_id == user.id))

        session = UserSession(
            user_id=user.id,
            token=generate_session_token(),
            expiry=datetime.utcnow() + timedelta(hours=settings.session_ttl_hours),
        )
        self.db.add(session)
        await self.db.flush()

        logger.info(f"User {user.username} logged in")
        return session

    async def get_session(self, token: str | None) -> UserSession | None:
        """
        Get live session by token.

        Expired sessions are deleted and reported as missing.
        """
        if not token:
            return None

        result = await self.db.execute(
            select(UserSession).where(UserSession.token == token)
        )
        session = result.scalar_one_or_none()

        if session is None:
            return None

        if session.is_expired:
            await self.db.delete(session)
            await self.db.flush()
            logger.debug(f"Dropped expired session of user {session.user_id}")
            return None

        return session

    async def get_user_by_token(self, token: str | None) -> User | None:
        """Resolve session token to its user."""
        session = await self.get_session(token)
        if session is None:
            return None
        return await self.get_user(session.user_id)

    async def delete_session(self, token: str | None) -> bool:
        """Log out: remove session. Returns True if a session existed."""
        if not token:
            return False

        result = await self.db.execute(
            delete(UserSession).where(UserSession.token == token)
        )
        removed = result.rowcount > 0
        if removed:
            logger.info("Session closed")
        return removed

    async def purge_expired_sessions(self) -> int:
        """Remove all expired sessions. Returns number removed."""
        result = await self.db.execute(
            delete(UserSession).where(UserSession.expiry <= datetime.utcnow())
        )
        if result.rowcount:
            logger.info(f"Purged {result.rowcount} expired sessions")
        return result.rowcount
