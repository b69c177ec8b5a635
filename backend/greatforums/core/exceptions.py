"""
Service-level errors.

Services raise these; the HTTP layer maps them to status codes.
"""


class ForumError(Exception):
    """Base error for forum operations."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ForumError):
    """Invalid user input."""

    status_code = 400


class InvalidCredentialsError(ForumError):
    """Unknown user or wrong password."""

    status_code = 401


class PermissionDeniedError(ForumError):
    """User may not act on this resource."""

    status_code = 403


class NotFoundError(ForumError):
    """Resource does not exist."""

    status_code = 404


class AlreadyExistsError(ForumError):
    """Unique field already taken."""

    status_code = 409
