"""Book lending module.

Provides functionality for:
- Listing books and browsing the marketplace
- Borrowing and returning books
- Auto-returning expired loans
- Loan request and transaction history
"""

from .manager import (
    BookNotAvailableError,
    BookNotFoundError,
    BookNotOnLoanError,
    LendingError,
    LendingManager,
    NotBorrowerError,
    OwnBookError,
    UserNotFoundError,
    check_invariants,
)
from .models import LoanRequest, Transaction
from .schemas import (
    LendingStats,
    LoanRequestResponse,
    LoanRequestStatus,
    TransactionResponse,
)
from .sweeper import ExpirySweeper

__all__ = [
    "LendingManager",
    "ExpirySweeper",
    "LendingError",
    "BookNotFoundError",
    "BookNotAvailableError",
    "BookNotOnLoanError",
    "NotBorrowerError",
    "OwnBookError",
    "UserNotFoundError",
    "check_invariants",
    "LoanRequest",
    "Transaction",
    "LendingStats",
    "LoanRequestResponse",
    "LoanRequestStatus",
    "TransactionResponse",
]
