"""Wishlist matching.

A pure function over the current books, wishlist and viewer. Callers run
it again after every change instead of caching the result.
"""

from typing import Iterable

from ..db.models import Book
from ..db.schemas import BookStatus

# The dashboard shows only the first few matches
DASHBOARD_MATCH_LIMIT = 3


def title_matches(title: str, wishlist: Iterable[str]) -> bool:
    """Check if any wishlist entry is a case-insensitive substring of the title."""
    lowered = title.lower()
    return any(wish.lower() in lowered for wish in wishlist)


def find_wishlist_matches(
    books: Iterable[Book],
    wishlist: Iterable[str],
    viewer_id: int,
) -> list[Book]:
    """Return the books the viewer could borrow that match their wishlist.

    A book matches when it is Available, is not owned by the viewer, and its
    title contains at least one wishlist entry (case-insensitive). Input
    order is preserved.
    """
    wishes = list(wishlist)
    return [
        book
        for book in books
        if book.status == BookStatus.AVAILABLE.value
        and book.owner_id != viewer_id
        and title_matches(book.title, wishes)
    ]
