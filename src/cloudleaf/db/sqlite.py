"""SQLite entity store.

Handles database connection, session management, and user/book CRUD.
The default database is in-memory, so all state lives for the process
lifetime only.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base, Book, User
from .schemas import BookCreate, BookStatus, UserCreate

AVATAR_URL = "https://i.pravatar.cc/150?u={}"


def avatar_for(name: str) -> str:
    """Derive the avatar URL from the lowercased user name."""
    return AVATAR_URL.format(name.lower())


class Database:
    """Database connection and operations manager."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses the
                     configured CLOUDLEAF_DB_PATH (in-memory by default).
        """
        if db_path is None:
            from ..config import get_config

            db_path = get_config().db_path

        self.db_path = str(db_path)
        self._is_memory = self.db_path == ":memory:"

        # For in-memory databases, use StaticPool to reuse the same connection
        # This ensures all sessions share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

    @property
    def is_memory(self) -> bool:
        return self._is_memory

    def create_tables(self) -> None:
        """Create all database tables."""
        # Import lending models to register them with Base
        from ..lending.models import LoanRequest, Transaction  # noqa: F401
        # Import wishlist models to register them with Base
        from ..wishlist.models import WishlistEntry  # noqa: F401

        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all database tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ========================================================================
    # User Operations
    # ========================================================================

    def create_user(self, user: UserCreate, session: Optional[Session] = None) -> User:
        """Create a user record.

        The id is ``count of users + 1``. ``user.password`` is stored as
        given; callers hash it first.
        """

        def _create(s: Session) -> User:
            next_id = self.count_users(session=s) + 1
            db_user = User(
                id=next_id,
                name=user.name,
                password=user.password,
                avatar=user.avatar or avatar_for(user.name),
                trust_score=user.trust_score,
            )
            db_user.set_ratings(user.ratings)
            s.add(db_user)
            s.flush()
            return db_user

        if session:
            return _create(session)
        else:
            with self.get_session() as s:
                db_user = _create(s)
                s.expunge(db_user)
                return db_user

    def get_user(self, user_id: int, session: Optional[Session] = None) -> Optional[User]:
        """Get a user by ID."""

        def _get(s: Session) -> Optional[User]:
            return s.get(User, user_id)

        if session:
            return _get(session)
        else:
            with self.get_session() as s:
                user = _get(s)
                if user:
                    s.expunge(user)
                return user

    def get_user_by_name(
        self, name: str, session: Optional[Session] = None
    ) -> Optional[User]:
        """Get a user by name (case-insensitive)."""

        def _get(s: Session) -> Optional[User]:
            stmt = select(User).where(func.lower(User.name) == name.lower())
            return s.execute(stmt).scalars().first()

        if session:
            return _get(session)
        else:
            with self.get_session() as s:
                user = _get(s)
                if user:
                    s.expunge(user)
                return user

    def list_users(self, session: Optional[Session] = None) -> list[User]:
        """List all users ordered by id."""

        def _list(s: Session) -> list[User]:
            return list(s.execute(select(User).order_by(User.id)).scalars().all())

        if session:
            return _list(session)
        else:
            with self.get_session() as s:
                users = _list(s)
                for u in users:
                    s.expunge(u)
                return users

    def count_users(self, session: Optional[Session] = None) -> int:
        """Count all users."""

        def _count(s: Session) -> int:
            return s.execute(select(func.count()).select_from(User)).scalar() or 0

        if session:
            return _count(session)
        else:
            with self.get_session() as s:
                return _count(s)

    # ========================================================================
    # Book Operations
    # ========================================================================

    def create_book(
        self,
        book: BookCreate,
        owner_id: int,
        session: Optional[Session] = None,
    ) -> Book:
        """Create a book owned by ``owner_id``. New books are always Available."""

        def _create(s: Session) -> Book:
            next_id = self.count_books(session=s) + 1
            db_book = Book(
                id=next_id,
                title=book.title,
                author=book.author,
                genre=book.genre,
                owner_id=owner_id,
                status=BookStatus.AVAILABLE.value,
            )
            s.add(db_book)
            s.flush()
            return db_book

        if session:
            return _create(session)
        else:
            with self.get_session() as s:
                db_book = _create(s)
                s.expunge(db_book)
                return db_book

    def get_book(self, book_id: int, session: Optional[Session] = None) -> Optional[Book]:
        """Get a book by ID."""

        def _get(s: Session) -> Optional[Book]:
            return s.get(Book, book_id)

        if session:
            return _get(session)
        else:
            with self.get_session() as s:
                book = _get(s)
                if book:
                    s.expunge(book)
                return book

    def list_books(
        self,
        owner_id: Optional[int] = None,
        borrower_id: Optional[int] = None,
        status: Optional[BookStatus] = None,
        session: Optional[Session] = None,
    ) -> list[Book]:
        """List books in id order with optional filters."""

        def _list(s: Session) -> list[Book]:
            stmt = select(Book)
            if owner_id is not None:
                stmt = stmt.where(Book.owner_id == owner_id)
            if borrower_id is not None:
                stmt = stmt.where(Book.borrower_id == borrower_id)
            if status is not None:
                stmt = stmt.where(Book.status == status.value)
            return list(s.execute(stmt.order_by(Book.id)).scalars().all())

        if session:
            return _list(session)
        else:
            with self.get_session() as s:
                books = _list(s)
                for b in books:
                    s.expunge(b)
                return books

    def count_books(self, session: Optional[Session] = None) -> int:
        """Count all books."""

        def _count(s: Session) -> int:
            return s.execute(select(func.count()).select_from(Book)).scalar() or 0

        if session:
            return _count(session)
        else:
            with self.get_session() as s:
                return _count(s)


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
