"""Manager for wishlist operations."""

import logging
from typing import Optional

from sqlalchemy import select

from ..config import Config, get_config
from ..db.models import Book, User
from ..db.sqlite import Database, get_db
from .matcher import find_wishlist_matches
from .models import WishlistEntry
from .schemas import WishlistEntryCreate, WishlistEntryResponse

logger = logging.getLogger(__name__)


class WishlistError(ValueError):
    """Raised for invalid wishlist operations."""

    pass


class WishlistManager:
    """Manager for per-user wishlists and their marketplace matches."""

    def __init__(self, db: Optional[Database] = None, config: Optional[Config] = None):
        """Initialize the wishlist manager.

        Args:
            db: Database instance
            config: Configuration (default wishlist entries)
        """
        self.db = db or get_db()
        self.config = config or get_config()

    def add_entry(self, user_id: int, entry: WishlistEntryCreate) -> WishlistEntryResponse:
        """Add an entry to a user's wishlist.

        Args:
            user_id: Owning user
            entry: Entry text

        Returns:
            Created entry
        """
        with self.db.get_session() as session:
            if session.get(User, user_id) is None:
                raise WishlistError(f"User {user_id} not found")

            item = WishlistEntry(user_id=user_id, text=entry.text)
            session.add(item)
            session.flush()

            return WishlistEntryResponse.model_validate(item)

    def add_defaults(self, user_id: int) -> list[WishlistEntryResponse]:
        """Give a user the configured starting wishlist."""
        return [
            self.add_entry(user_id, WishlistEntryCreate(text=text))
            for text in self.config.default_wishlist
        ]

    def remove_entry(self, user_id: int, entry_id: int) -> bool:
        """Remove one of a user's wishlist entries.

        Args:
            user_id: Owning user
            entry_id: Entry ID

        Returns:
            True if removed, False if the user has no such entry
        """
        with self.db.get_session() as session:
            item = session.execute(
                select(WishlistEntry).where(
                    WishlistEntry.id == entry_id,
                    WishlistEntry.user_id == user_id,
                )
            ).scalar_one_or_none()

            if not item:
                return False

            session.delete(item)
            logger.info("User %s removed wishlist entry '%s'", user_id, item.text)
            return True

    def list_entries(self, user_id: int) -> list[WishlistEntryResponse]:
        """List a user's wishlist entries in the order they were added."""
        with self.db.get_session() as session:
            items = session.execute(
                select(WishlistEntry)
                .where(WishlistEntry.user_id == user_id)
                .order_by(WishlistEntry.id)
            ).scalars().all()
            return [WishlistEntryResponse.model_validate(i) for i in items]

    def get_texts(self, user_id: int) -> list[str]:
        """Just the entry texts."""
        return [e.text for e in self.list_entries(user_id)]

    def get_matches(self, user_id: int, limit: Optional[int] = None) -> list[Book]:
        """Marketplace books matching a user's wishlist, computed from current state.

        Args:
            user_id: Viewing user
            limit: Keep only the first N matches

        Returns:
            Matching books in id order
        """
        wishlist = self.get_texts(user_id)
        if not wishlist:
            return []

        with self.db.get_session() as session:
            books = list(session.execute(select(Book).order_by(Book.id)).scalars().all())
            for b in books:
                session.expunge(b)

        matches = find_wishlist_matches(books, wishlist, user_id)
        if limit is not None:
            matches = matches[:limit]
        return matches
