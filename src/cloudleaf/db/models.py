"""SQLAlchemy ORM models for the entity store.

Tables:
- users: People who lend and borrow books
- books: Books listed by their owners
"""

import json
import math
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .schemas import BookStatus


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Make a datetime aware, assuming UTC for naive values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_iso(value: datetime) -> str:
    """Serialize a datetime as ISO-8601 in UTC."""
    return ensure_utc(value).astimezone(timezone.utc).isoformat()


def from_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp written by :func:`to_iso`."""
    return ensure_utc(datetime.fromisoformat(value))


class User(Base):
    """User model - a member who owns, lends and borrows books."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(200), nullable=False)
    avatar: Mapped[str] = mapped_column(String(300), nullable=False)
    trust_score: Mapped[float] = mapped_column(Float, default=4.0)
    ratings: Mapped[Optional[str]] = mapped_column(Text)  # JSON array of ints

    created_at: Mapped[str] = mapped_column(
        String(32), default=lambda: utcnow().isoformat()
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}')>"

    def get_ratings(self) -> list[int]:
        """Get ratings as list."""
        if self.ratings:
            return json.loads(self.ratings)
        return []

    def set_ratings(self, ratings: list[int]) -> None:
        """Set ratings from list."""
        self.ratings = json.dumps(ratings) if ratings else None

    def add_rating(self, value: int) -> None:
        """Append a 1-5 rating."""
        if not 1 <= value <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {value}")
        self.set_ratings(self.get_ratings() + [value])

    @property
    def average_rating(self) -> Optional[float]:
        """Mean of all ratings, or None when unrated."""
        ratings = self.get_ratings()
        if not ratings:
            return None
        return round(sum(ratings) / len(ratings), 2)


class Book(Base):
    """Book model - a physical book listed by its owner."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(300), nullable=False)
    genre: Mapped[str] = mapped_column(String(100), nullable=False)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=BookStatus.AVAILABLE.value, index=True
    )

    # Set iff status is "On Loan"
    borrower_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), index=True
    )
    loan_end_date: Mapped[Optional[str]] = mapped_column(String(32))  # ISO datetime

    created_at: Mapped[str] = mapped_column(
        String(32), default=lambda: utcnow().isoformat()
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', status='{self.status}')>"

    @property
    def is_available(self) -> bool:
        return self.status == BookStatus.AVAILABLE.value

    @property
    def is_on_loan(self) -> bool:
        return self.status == BookStatus.ON_LOAN.value

    @property
    def loan_end_at(self) -> Optional[datetime]:
        """Loan end as an aware datetime."""
        if not self.loan_end_date:
            return None
        return from_iso(self.loan_end_date)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the loan end date is strictly in the past."""
        end = self.loan_end_at
        if not self.is_on_loan or end is None:
            return False
        return end < ensure_utc(now or utcnow())

    def days_left(self, now: Optional[datetime] = None) -> int:
        """Whole days until the loan ends, rounded up (0 when not on loan)."""
        end = self.loan_end_at
        if end is None:
            return 0
        seconds = (end - ensure_utc(now or utcnow())).total_seconds()
        return math.ceil(seconds / 86400)
