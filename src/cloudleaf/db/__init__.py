"""Database module for the in-memory SQLite entity store."""

from .models import Book, User
from .schemas import BookCreate, BookResponse, BookStatus, UserCreate, UserResponse
from .sqlite import Database, get_db, reset_db

__all__ = [
    "Book",
    "User",
    "BookCreate",
    "BookResponse",
    "BookStatus",
    "UserCreate",
    "UserResponse",
    "Database",
    "get_db",
    "reset_db",
]
