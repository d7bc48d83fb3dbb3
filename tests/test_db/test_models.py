"""Tests for entity store models and time helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from cloudleaf.db.models import Book, User, from_iso, to_iso, utcnow
from cloudleaf.db.schemas import BookStatus


def make_loaned_book(end: datetime) -> Book:
    return Book(
        id=1,
        title="Dracula",
        author="Bram Stoker",
        genre="Horror",
        owner_id=1,
        status=BookStatus.ON_LOAN.value,
        borrower_id=2,
        loan_end_date=to_iso(end),
    )


class TestTimeHelpers:
    """Tests for ISO timestamp helpers."""

    def test_utcnow_is_aware(self):
        """Test utcnow returns UTC."""
        assert utcnow().tzinfo is not None

    def test_iso_roundtrip_keeps_instant(self, now):
        """Test to_iso/from_iso preserve the instant."""
        assert from_iso(to_iso(now)) == now

    def test_naive_treated_as_utc(self):
        """Test naive datetimes are assumed to be UTC."""
        naive = datetime(2025, 1, 1, 8, 0)
        assert from_iso(to_iso(naive)) == naive.replace(tzinfo=timezone.utc)


class TestUser:
    """Tests for the User model."""

    def test_ratings(self):
        """Test ratings helpers and average."""
        user = User(id=1, name="Alice", password="p", avatar="a")
        assert user.get_ratings() == []
        assert user.average_rating is None

        user.set_ratings([5, 5, 4])
        user.add_rating(3)

        assert user.get_ratings() == [5, 5, 4, 3]
        assert user.average_rating == 4.25

    def test_add_rating_out_of_range(self):
        """Test ratings outside 1-5 are rejected."""
        user = User(id=1, name="Alice", password="p", avatar="a")
        with pytest.raises(ValueError):
            user.add_rating(0)


class TestBookLoanState:
    """Tests for Book loan helpers."""

    def test_available_book(self, now):
        """Test a book with no loan."""
        book = Book(id=1, title="Emma", author="A", genre="G", owner_id=1,
                    status=BookStatus.AVAILABLE.value)

        assert book.is_available
        assert not book.is_on_loan
        assert book.loan_end_at is None
        assert not book.is_expired(now)
        assert book.days_left(now) == 0

    def test_expired_is_strict(self, now):
        """Test a loan ending exactly now is not yet expired."""
        assert not make_loaned_book(now).is_expired(now)
        assert make_loaned_book(now - timedelta(seconds=1)).is_expired(now)
        assert not make_loaned_book(now + timedelta(days=1)).is_expired(now)

    def test_naive_now_treated_as_utc(self, now):
        """Test expiry and days left accept a naive reference time."""
        naive = now.replace(tzinfo=None)
        book = make_loaned_book(now + timedelta(days=2))

        assert not book.is_expired(naive)
        assert book.is_expired(naive + timedelta(days=3))
        assert book.days_left(naive) == 2

    def test_days_left_rounds_up(self, now):
        """Test partial days count as a whole day."""
        assert make_loaned_book(now + timedelta(days=14)).days_left(now) == 14
        assert make_loaned_book(now + timedelta(hours=1)).days_left(now) == 1
        assert make_loaned_book(now + timedelta(days=2, hours=3)).days_left(now) == 3
