"""Sample users and books loaded at startup."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .auth.hashing import PasswordHasher, get_hasher
from .config import Config, get_config
from .db.models import Book, to_iso, utcnow
from .db.schemas import BookStatus, UserCreate
from .db.sqlite import Database, avatar_for
from .wishlist.manager import WishlistManager

logger = logging.getLogger(__name__)

SEED_PASSWORD = "password123"

SEED_USERS = [
    {"name": "Alice", "trust_score": 4.8, "ratings": [5, 5, 4]},
    {"name": "Bob", "trust_score": 4.5, "ratings": [4, 5]},
    {"name": "Charlie", "trust_score": 4.9, "ratings": [5, 5, 5, 4]},
    {"name": "Diana", "trust_score": 4.2, "ratings": [4, 4]},
]

SEED_BOOKS = [
    {"title": "Moby Dick", "author": "Herman Melville", "genre": "Adventure", "owner_id": 2},
    {"title": "Pride and Prejudice", "author": "Jane Austen", "genre": "Romance", "owner_id": 1},
    {"title": "The Adventures of Tom Sawyer", "author": "Mark Twain", "genre": "Adventure", "owner_id": 3},
    {"title": "Frankenstein", "author": "Mary Shelley", "genre": "Gothic", "owner_id": 1},
    {"title": "A Tale of Two Cities", "author": "Charles Dickens", "genre": "Historical", "owner_id": 4},
    {"title": "Dracula", "author": "Bram Stoker", "genre": "Horror", "owner_id": 2},
    {"title": "The Scarlet Letter", "author": "Nathaniel Hawthorne", "genre": "Romance", "owner_id": 3},
    # On loan to Diana, due back in three days
    {
        "title": "War and Peace",
        "author": "Leo Tolstoy",
        "genre": "Historical",
        "owner_id": 1,
        "borrower_id": 4,
        "loan_days_left": 3,
    },
]


def seed_demo_data(
    db: Database,
    hasher: Optional[PasswordHasher] = None,
    config: Optional[Config] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Load the sample users, books and wishlists.

    Does nothing if the store already has users.

    Args:
        db: Database to fill
        hasher: Hashes the seed password (default: configured hasher)
        config: Configuration (default wishlist)
        now: Reference time for seeded loans

    Returns:
        True if data was loaded
    """
    config = config or get_config()
    hasher = hasher or get_hasher(config.password_hasher)
    now = now or utcnow()

    if db.count_users() > 0:
        return False

    with db.get_session() as session:
        for data in SEED_USERS:
            db.create_user(
                UserCreate(
                    name=data["name"],
                    password=hasher.hash(SEED_PASSWORD),
                    avatar=avatar_for(data["name"]),
                    trust_score=data["trust_score"],
                    ratings=data["ratings"],
                ),
                session=session,
            )

        for book_id, data in enumerate(SEED_BOOKS, start=1):
            book = Book(
                id=book_id,
                title=data["title"],
                author=data["author"],
                genre=data["genre"],
                owner_id=data["owner_id"],
                status=BookStatus.AVAILABLE.value,
            )
            if "borrower_id" in data:
                book.status = BookStatus.ON_LOAN.value
                book.borrower_id = data["borrower_id"]
                book.loan_end_date = to_iso(now + timedelta(days=data["loan_days_left"]))
            session.add(book)

    wishlist = WishlistManager(db, config)
    for user in db.list_users():
        wishlist.add_defaults(user.id)

    logger.info("Seeded %d users and %d books", len(SEED_USERS), len(SEED_BOOKS))
    return True
