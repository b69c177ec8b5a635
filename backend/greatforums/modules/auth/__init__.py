"""
Auth Module - Accounts and login sessions.

Features:
- Registration with bcrypt password hashing
- Login with opaque session tokens
- Logout and expired session cleanup
"""

from greatforums.modules.auth.service import AuthService

__all__ = ["AuthService"]
