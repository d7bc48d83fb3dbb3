"""Wishlist module.

Provides functionality for:
- Per-user wishlist entries (add, remove, list)
- Matching wishlist entries against the marketplace
"""

from .manager import WishlistError, WishlistManager
from .matcher import DASHBOARD_MATCH_LIMIT, find_wishlist_matches, title_matches
from .models import WishlistEntry
from .schemas import WishlistEntryCreate, WishlistEntryResponse

__all__ = [
    "WishlistManager",
    "WishlistError",
    "WishlistEntry",
    "WishlistEntryCreate",
    "WishlistEntryResponse",
    "DASHBOARD_MATCH_LIMIT",
    "find_wishlist_matches",
    "title_matches",
]
