"""Application facade.

Wires the store, auth gate, lending engine, wishlist and summary assistant
together and holds the session state of one running app: the current
user, the summary cards and the expiry sweep clock.
"""

from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel

from .auth import AuthManager, PasswordHasher
from .config import Config, get_config
from .db.models import Book, User, utcnow
from .db.schemas import BookCreate, BookResponse, UserResponse
from .db.sqlite import Database, get_db
from .lending import (
    BookNotFoundError,
    ExpirySweeper,
    LendingManager,
    LoanRequestResponse,
    Transaction,
    TransactionResponse,
)
from .seed import seed_demo_data
from .summaries import SummaryAssistant, SummaryCard, TextGenerator
from .wishlist import (
    DASHBOARD_MATCH_LIMIT,
    WishlistEntryCreate,
    WishlistEntryResponse,
    WishlistManager,
)


class NotLoggedInError(ValueError):
    """Raised when an action needs a logged-in user."""

    pass


class Dashboard(BaseModel):
    """Everything the dashboard view shows for the current user."""

    user: UserResponse
    my_books: list[BookResponse]
    borrowed_books: list[BookResponse]
    wishlist: list[WishlistEntryResponse]
    wishlist_matches: list[BookResponse]
    total_matches: int


class CloudLeafApp:
    """A running CloudLeaf session."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        hasher: Optional[PasswordHasher] = None,
        generator: Optional[TextGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
        seed: bool = True,
    ):
        """Initialize the app.

        Args:
            db: Database instance
            config: Configuration
            hasher: Password hasher (default: configured hasher)
            generator: Text generator for summaries (default: Gemini client)
            clock: Returns the current time
            seed: Load the sample data into an empty store
        """
        self.config = config or get_config()
        self.db = db or get_db()
        self.clock = clock

        self.wishlist = WishlistManager(self.db, self.config)
        self.auth = AuthManager(self.db, self.config, hasher=hasher, wishlist=self.wishlist)
        self.lending = LendingManager(self.db, self.config)
        self.sweeper = ExpirySweeper(self.lending, clock=clock)
        if generator is not None:
            self.summaries = SummaryAssistant(generator)
        else:
            self.summaries = SummaryAssistant.from_config(self.config)

        if seed:
            seed_demo_data(self.db, self.auth.hasher, self.config, now=clock())

    # ---- session

    @property
    def current_user(self) -> Optional[User]:
        return self.auth.current_user

    def require_user(self) -> User:
        user = self.auth.current_user
        if user is None:
            raise NotLoggedInError("Please log in first.")
        return user

    def login(self, name: str, password: str) -> bool:
        return self.auth.login(name, password)

    def sign_up(self, name: str, password: str) -> bool:
        return self.auth.sign_up(name, password)

    def logout(self) -> None:
        self.auth.logout()
        self.summaries.clear()

    # ---- timer

    def tick(self, now: Optional[datetime] = None) -> list[Transaction]:
        """Run the expiry sweep if its interval has elapsed."""
        return self.sweeper.maybe_run(now or self.clock())

    # ---- books and loans

    def add_book(self, title: str, author: str, genre: str) -> Book:
        user = self.require_user()
        return self.lending.add_book(
            user.id, BookCreate(title=title, author=author, genre=genre)
        )

    def borrow(self, book_id: int) -> Book:
        user = self.require_user()
        return self.lending.request_borrow(book_id, user.id, now=self.clock())

    def return_book(self, book_id: int) -> Transaction:
        user = self.require_user()
        return self.lending.return_book(book_id, user.id, now=self.clock())

    def marketplace(self) -> list[BookResponse]:
        user = self.require_user()
        return [self.lending.to_book_response(b) for b in self.lending.list_marketplace(user.id)]

    def history(self) -> list[TransactionResponse]:
        user = self.require_user()
        return [
            self.lending.to_transaction_response(t)
            for t in self.lending.list_transactions(user.id)
        ]

    def loan_requests(self) -> list[LoanRequestResponse]:
        """Borrow requests the current user has made, oldest first."""
        user = self.require_user()
        return [
            LoanRequestResponse.model_validate(r)
            for r in self.lending.list_loan_requests(user.id)
        ]

    # ---- wishlist

    def add_wish(self, text: str) -> WishlistEntryResponse:
        user = self.require_user()
        return self.wishlist.add_entry(user.id, WishlistEntryCreate(text=text))

    def remove_wish(self, entry_id: int) -> bool:
        user = self.require_user()
        return self.wishlist.remove_entry(user.id, entry_id)

    def dashboard(self) -> Dashboard:
        """Build the dashboard from current state."""
        user = self.require_user()
        matches = self.wishlist.get_matches(user.id)
        user = self.auth.refresh() or user

        return Dashboard(
            user=UserResponse(
                id=user.id,
                name=user.name,
                avatar=user.avatar,
                trust_score=user.trust_score,
                ratings=user.get_ratings(),
                average_rating=user.average_rating,
            ),
            my_books=[self.lending.to_book_response(b) for b in self.lending.list_owned(user.id)],
            borrowed_books=[
                self.lending.to_book_response(b) for b in self.lending.list_borrowed(user.id)
            ],
            wishlist=self.wishlist.list_entries(user.id),
            wishlist_matches=[
                self.lending.to_book_response(b) for b in matches[:DASHBOARD_MATCH_LIMIT]
            ],
            total_matches=len(matches),
        )

    # ---- summaries

    def toggle_summary(self, book_id: int) -> SummaryCard:
        """Expand or collapse a book's summary card."""
        self.require_user()
        book = self.lending.get_book(book_id)
        if book is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        return self.summaries.toggle(book.id, book.title, book.author)
