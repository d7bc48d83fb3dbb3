"""Lending manager: the loan lifecycle of a book.

A book moves Available -> On Loan on borrow and back to Available on
return, either by its borrower or by the expiry sweep once the loan end
date has passed. Borrow requests are approved as soon as they are made.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..config import Config, get_config
from ..db.models import Book, User, ensure_utc, to_iso, utcnow
from ..db.schemas import BookCreate, BookResponse, BookStatus
from ..db.sqlite import Database, get_db
from .models import LoanRequest, Transaction
from .schemas import LendingStats, LoanRequestStatus, TransactionResponse

logger = logging.getLogger(__name__)


class LendingError(ValueError):
    """Base exception for rejected lending operations."""

    pass


class BookNotFoundError(LendingError):
    """Raised when a book id does not exist."""

    pass


class UserNotFoundError(LendingError):
    """Raised when a user id does not exist."""

    pass


class OwnBookError(LendingError):
    """Raised when an owner tries to borrow their own book."""

    pass


class BookNotAvailableError(LendingError):
    """Raised when borrowing a book that is not Available."""

    pass


class BookNotOnLoanError(LendingError):
    """Raised when returning a book that is not on loan."""

    pass


class NotBorrowerError(LendingError):
    """Raised when someone other than the borrower returns a book."""

    pass


def check_invariants(book: Book) -> list[str]:
    """Return the loan-state invariant violations for a book (empty if none)."""
    problems = []
    on_loan = book.status == BookStatus.ON_LOAN.value

    if on_loan != (book.borrower_id is not None):
        problems.append(
            f"book {book.id}: status '{book.status}' but borrower_id={book.borrower_id}"
        )
    if on_loan != (book.loan_end_date is not None):
        problems.append(
            f"book {book.id}: status '{book.status}' but loan_end_date={book.loan_end_date}"
        )
    if book.borrower_id is not None and book.borrower_id == book.owner_id:
        problems.append(f"book {book.id}: borrower is the owner")

    return problems


class LendingManager:
    """Manages books and their loan lifecycle."""

    def __init__(self, db: Optional[Database] = None, config: Optional[Config] = None):
        """Initialize lending manager.

        Args:
            db: Database instance
            config: Configuration (loan period)
        """
        self.db = db or get_db()
        self.config = config or get_config()

    @property
    def loan_period(self) -> timedelta:
        return timedelta(days=self.config.loan_days)

    # -------------------------------------------------------------------------
    # Books
    # -------------------------------------------------------------------------

    def add_book(self, owner_id: int, data: BookCreate) -> Book:
        """List a new book for its owner.

        Args:
            owner_id: Owning user ID
            data: Title, author and genre

        Returns:
            Created book (always Available)
        """
        with self.db.get_session() as session:
            if session.get(User, owner_id) is None:
                raise UserNotFoundError(f"User {owner_id} not found")

            book = self.db.create_book(data, owner_id, session=session)
            session.expunge(book)

        logger.info("User %s added book %s '%s'", owner_id, book.id, book.title)
        return book

    def get_book(self, book_id: int) -> Optional[Book]:
        """Get a book by ID."""
        return self.db.get_book(book_id)

    def list_books(self) -> list[Book]:
        """List every book."""
        return self.db.list_books()

    def list_owned(self, user_id: int) -> list[Book]:
        """Books listed by a user ("My Books")."""
        return self.db.list_books(owner_id=user_id)

    def list_borrowed(self, user_id: int) -> list[Book]:
        """Books a user currently has on loan ("Borrowed Books")."""
        return self.db.list_books(borrower_id=user_id)

    def list_marketplace(self, user_id: int) -> list[Book]:
        """Available books owned by someone else."""
        with self.db.get_session() as session:
            stmt = (
                select(Book)
                .where(
                    Book.owner_id != user_id,
                    Book.status == BookStatus.AVAILABLE.value,
                )
                .order_by(Book.id)
            )
            books = list(session.execute(stmt).scalars().all())
            for b in books:
                session.expunge(b)
            return books

    # -------------------------------------------------------------------------
    # Loan Lifecycle
    # -------------------------------------------------------------------------

    def request_borrow(
        self,
        book_id: int,
        actor_id: int,
        now: Optional[datetime] = None,
    ) -> Book:
        """Request to borrow a book.

        The request is approved immediately: the book goes On Loan to the
        actor until ``now`` plus the loan period.

        Args:
            book_id: Book to borrow
            actor_id: Borrowing user
            now: Time of the request (default: current UTC time)

        Returns:
            The updated book

        Raises:
            BookNotFoundError: Unknown book
            UserNotFoundError: Unknown actor
            OwnBookError: Actor owns the book
            BookNotAvailableError: Book is not Available
        """
        now = ensure_utc(now or utcnow())

        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if book is None:
                raise BookNotFoundError(f"Book {book_id} not found")
            if session.get(User, actor_id) is None:
                raise UserNotFoundError(f"User {actor_id} not found")
            if book.owner_id == actor_id:
                raise OwnBookError("You cannot borrow your own book")
            if not book.is_available:
                raise BookNotAvailableError(f"'{book.title}' is not available")

            request = LoanRequest(
                book_id=book.id,
                book_title=book.title,
                requester_id=actor_id,
                status=LoanRequestStatus.PENDING.value,
            )
            session.add(request)
            self._approve(session, request, book, now)

            session.flush()
            session.expunge(book)

        logger.info(
            "User %s borrowed book %s '%s' until %s",
            actor_id, book.id, book.title, book.loan_end_date,
        )
        return book

    def _approve(
        self, session: Session, request: LoanRequest, book: Book, now: datetime
    ) -> None:
        """Approve a pending request and put the book on loan."""
        request.status = LoanRequestStatus.APPROVED.value
        book.status = BookStatus.ON_LOAN.value
        book.borrower_id = request.requester_id
        book.loan_end_date = to_iso(now + self.loan_period)

    def return_book(
        self,
        book_id: int,
        actor_id: int,
        now: Optional[datetime] = None,
    ) -> Transaction:
        """Return a borrowed book.

        Args:
            book_id: Book being returned
            actor_id: Returning user, must be the current borrower
            now: Time of return (default: current UTC time)

        Returns:
            The appended transaction

        Raises:
            BookNotFoundError: Unknown book
            BookNotOnLoanError: Book is not on loan
            NotBorrowerError: Actor is not the borrower
        """
        now = ensure_utc(now or utcnow())

        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if book is None:
                raise BookNotFoundError(f"Book {book_id} not found")
            if not book.is_on_loan:
                raise BookNotOnLoanError(f"'{book.title}' is not on loan")
            if book.borrower_id != actor_id:
                raise NotBorrowerError(f"You are not borrowing '{book.title}'")

            transaction = self._complete_loan(session, book, now, auto=False)
            session.flush()
            session.expunge(transaction)

        logger.info("User %s returned book %s", actor_id, book_id)
        return transaction

    def sweep_expired(self, now: Optional[datetime] = None) -> list[Transaction]:
        """Return every loan whose end date is strictly before ``now``.

        The transaction records the book's actual borrower.

        Returns:
            Transactions appended by this sweep
        """
        now = ensure_utc(now or utcnow())
        transactions = []

        with self.db.get_session() as session:
            stmt = (
                select(Book)
                .where(Book.status == BookStatus.ON_LOAN.value)
                .order_by(Book.id)
            )
            for book in session.execute(stmt).scalars().all():
                if not book.is_expired(now):
                    continue
                logger.info("Loan for '%s' expired. Auto-returning.", book.title)
                transactions.append(self._complete_loan(session, book, now, auto=True))

            session.flush()
            for t in transactions:
                session.expunge(t)

        return transactions

    def _complete_loan(
        self, session: Session, book: Book, now: datetime, auto: bool
    ) -> Transaction:
        """Append the transaction and make the book Available in one session."""
        transaction = Transaction(
            book_id=book.id,
            book_title=book.title,
            book_author=book.author,
            lender_id=book.owner_id,
            borrower_id=book.borrower_id,
            return_date=to_iso(now),
            lender_rated=False,
            borrower_rated=False,
            auto_returned=auto,
        )
        session.add(transaction)

        book.status = BookStatus.AVAILABLE.value
        book.borrower_id = None
        book.loan_end_date = None

        return transaction

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def list_transactions(self, user_id: Optional[int] = None) -> list[Transaction]:
        """List transactions, oldest first.

        Args:
            user_id: Only transactions where this user lent or borrowed
        """
        with self.db.get_session() as session:
            stmt = select(Transaction)
            if user_id is not None:
                stmt = stmt.where(
                    or_(
                        Transaction.lender_id == user_id,
                        Transaction.borrower_id == user_id,
                    )
                )
            transactions = list(session.execute(stmt.order_by(Transaction.id)).scalars().all())
            for t in transactions:
                session.expunge(t)
            return transactions

    def list_loan_requests(self, requester_id: Optional[int] = None) -> list[LoanRequest]:
        """List loan requests, oldest first."""
        with self.db.get_session() as session:
            stmt = select(LoanRequest)
            if requester_id is not None:
                stmt = stmt.where(LoanRequest.requester_id == requester_id)
            requests = list(session.execute(stmt.order_by(LoanRequest.id)).scalars().all())
            for r in requests:
                session.expunge(r)
            return requests

    # -------------------------------------------------------------------------
    # Responses and Statistics
    # -------------------------------------------------------------------------

    def to_book_response(self, book: Book) -> BookResponse:
        """Build a BookResponse with owner and borrower names."""
        owner = self.db.get_user(book.owner_id)
        borrower = self.db.get_user(book.borrower_id) if book.borrower_id else None
        return BookResponse(
            id=book.id,
            title=book.title,
            author=book.author,
            genre=book.genre,
            owner_id=book.owner_id,
            status=BookStatus(book.status),
            borrower_id=book.borrower_id,
            loan_end_date=book.loan_end_at,
            owner_name=owner.name if owner else None,
            borrower_name=borrower.name if borrower else None,
        )

    def to_transaction_response(self, transaction: Transaction) -> TransactionResponse:
        """Build a TransactionResponse with lender and borrower names."""
        response = TransactionResponse.model_validate(transaction)
        lender = self.db.get_user(transaction.lender_id)
        borrower = self.db.get_user(transaction.borrower_id)
        response.lender_name = lender.name if lender else None
        response.borrower_name = borrower.name if borrower else None
        return response

    def get_stats(self) -> LendingStats:
        """Get overall lending statistics."""
        with self.db.get_session() as session:
            total_books = session.execute(
                select(func.count()).select_from(Book)
            ).scalar() or 0

            available_books = session.execute(
                select(func.count()).where(Book.status == BookStatus.AVAILABLE.value)
            ).scalar() or 0

            books_on_loan = session.execute(
                select(func.count()).where(Book.status == BookStatus.ON_LOAN.value)
            ).scalar() or 0

            total_requests = session.execute(
                select(func.count()).select_from(LoanRequest)
            ).scalar() or 0

            total_transactions = session.execute(
                select(func.count()).select_from(Transaction)
            ).scalar() or 0

            auto_returns = session.execute(
                select(func.count()).where(Transaction.auto_returned.is_(True))
            ).scalar() or 0

            return LendingStats(
                total_books=total_books,
                available_books=available_books,
                books_on_loan=books_on_loan,
                total_requests=total_requests,
                total_transactions=total_transactions,
                auto_returns=auto_returns,
            )
