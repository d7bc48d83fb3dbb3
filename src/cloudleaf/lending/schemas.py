"""Pydantic schemas for book lending."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class LoanRequestStatus(str, Enum):
    """Status of a loan request."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class LoanRequestResponse(BaseModel):
    """Schema for loan request responses."""

    id: int
    book_id: int
    book_title: str
    requester_id: int
    status: LoanRequestStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class TransactionResponse(BaseModel):
    """Schema for transaction responses."""

    id: int
    book_id: int
    book_title: str
    book_author: str
    lender_id: int
    borrower_id: int
    return_date: datetime
    lender_rated: bool
    borrower_rated: bool
    auto_returned: bool

    # Related data (populated by manager)
    lender_name: Optional[str] = None
    borrower_name: Optional[str] = None

    model_config = {"from_attributes": True}


class LendingStats(BaseModel):
    """Overall lending statistics."""

    total_books: int
    available_books: int
    books_on_loan: int
    total_requests: int
    total_transactions: int
    auto_returns: int
