"""SQLAlchemy models for book lending.

Tables:
- loan_requests: Borrow requests (auto-approved on creation)
- transactions: Completed loans, appended when a book comes back
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, from_iso, utcnow


class LoanRequest(Base):
    """Loan request model - a borrower asking an owner for a book."""

    __tablename__ = "loan_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id"), nullable=False, index=True
    )
    book_title: Mapped[str] = mapped_column(String(500), nullable=False)
    requester_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )

    # pending / approved / denied
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)

    created_at: Mapped[str] = mapped_column(
        String(32), default=lambda: utcnow().isoformat()
    )

    def __repr__(self) -> str:
        return (
            f"<LoanRequest(id={self.id}, book_id={self.book_id}, "
            f"requester_id={self.requester_id}, status={self.status})>"
        )


class Transaction(Base):
    """Transaction model - one finished loan, kept for history and ratings."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Snapshot of the book at return time
    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id"), nullable=False, index=True
    )
    book_title: Mapped[str] = mapped_column(String(500), nullable=False)
    book_author: Mapped[str] = mapped_column(String(300), nullable=False)

    lender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    borrower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    return_date: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO datetime

    # Nothing flips these yet
    lender_rated: Mapped[bool] = mapped_column(Boolean, default=False)
    borrower_rated: Mapped[bool] = mapped_column(Boolean, default=False)

    # True when the expiry sweep returned the book
    auto_returned: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, book_id={self.book_id}, "
            f"lender_id={self.lender_id}, borrower_id={self.borrower_id})>"
        )

    @property
    def returned_at(self) -> Optional[datetime]:
        if not self.return_date:
            return None
        return from_iso(self.return_date)
