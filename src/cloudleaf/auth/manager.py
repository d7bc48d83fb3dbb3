"""Auth gate: login, sign-up and the current-user session."""

import logging
from typing import Optional

from ..config import Config, get_config
from ..db.models import User
from ..db.schemas import UserCreate
from ..db.sqlite import Database, avatar_for, get_db
from ..wishlist.manager import WishlistManager
from .hashing import PasswordHasher, get_hasher

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed. Invalid name or password."
SIGNUP_FAILED = "Sign up failed. User already exists."


class AuthError(ValueError):
    """Raised when credentials are malformed."""

    pass


def validate_credentials(name: str, password: str) -> None:
    """Reject an empty name or password the way the login form does.

    Raises:
        AuthError: Name is blank or password is empty
    """
    if not name or not name.strip():
        raise AuthError("Name cannot be empty.")
    if not password:
        raise AuthError("Password cannot be empty.")


class AuthManager:
    """Validates credentials and holds the logged-in user."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        hasher: Optional[PasswordHasher] = None,
        wishlist: Optional[WishlistManager] = None,
    ):
        """Initialize the auth manager.

        Args:
            db: Database instance
            config: Configuration (hasher name, default trust score)
            hasher: Password hasher, overrides the configured one
            wishlist: Used to give new users the default wishlist
        """
        self.db = db or get_db()
        self.config = config or get_config()
        self.hasher = hasher or get_hasher(self.config.password_hasher)
        self.wishlist = wishlist or WishlistManager(self.db, self.config)
        self._current_user: Optional[User] = None

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    def login(self, name: str, password: str) -> bool:
        """Log in with a case-insensitive name and an exact password.

        Returns:
            True and sets the current user on success, False otherwise
        """
        validate_credentials(name, password)

        user = self.db.get_user_by_name(name.strip())
        if user is None or not self.hasher.verify(password, user.password):
            logger.info("Failed login for '%s'", name)
            return False

        self._current_user = user
        logger.info("User %s logged in", user.id)
        return True

    def sign_up(self, name: str, password: str) -> bool:
        """Register a new user and log them in.

        Fails when the name is taken, ignoring case.

        Returns:
            True on success, False if the name already exists
        """
        validate_credentials(name, password)
        name = name.strip()

        if self.db.get_user_by_name(name) is not None:
            logger.info("Sign up rejected, '%s' already exists", name)
            return False

        user = self.db.create_user(
            UserCreate(
                name=name,
                password=self.hasher.hash(password),
                avatar=avatar_for(name),
                trust_score=self.config.default_trust_score,
                ratings=[],
            )
        )
        self.wishlist.add_defaults(user.id)

        self._current_user = user
        logger.info("Signed up user %s '%s'", user.id, user.name)
        return True

    def logout(self) -> None:
        """Clear the current user. Books and loans are left as they are."""
        if self._current_user is not None:
            logger.info("User %s logged out", self._current_user.id)
        self._current_user = None

    def refresh(self) -> Optional[User]:
        """Reload the current user from the store."""
        if self._current_user is not None:
            self._current_user = self.db.get_user(self._current_user.id)
        return self._current_user
