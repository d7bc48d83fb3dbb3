"""Authentication module.

Provides functionality for:
- Logging in and signing up
- The current-user session
- Pluggable password hashing
"""

from .hashing import BcryptHasher, PasswordHasher, PlaintextHasher, get_hasher
from .manager import (
    LOGIN_FAILED,
    SIGNUP_FAILED,
    AuthError,
    AuthManager,
    validate_credentials,
)

__all__ = [
    "AuthManager",
    "AuthError",
    "LOGIN_FAILED",
    "SIGNUP_FAILED",
    "validate_credentials",
    "PasswordHasher",
    "BcryptHasher",
    "PlaintextHasher",
    "get_hasher",
]
