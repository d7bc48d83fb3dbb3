"""Command-line interface for cloudleaf.

Built with Typer for commands and Rich for beautiful output. State is
in-memory by default, so ``cloudleaf shell`` is where lending actually
happens; the one-shot commands inspect a freshly seeded store (or the
database at CLOUDLEAF_DB_PATH).
"""

import math
import shlex
from datetime import datetime
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .app import CloudLeafApp
from .auth import LOGIN_FAILED, SIGNUP_FAILED
from .config import get_config
from .db import BookResponse, get_db
from .log import configure_logging

# Create the main app
app = typer.Typer(
    name="cloudleaf",
    help="Lend and borrow books with the people around you.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def get_app() -> CloudLeafApp:
    """Build the app on the global database, seeding it if empty."""
    return CloudLeafApp(db=get_db())


def _days_left(book: BookResponse, now: datetime) -> int:
    if book.loan_end_date is None:
        return 0
    return math.ceil((book.loan_end_date - now).total_seconds() / 86400)


def format_book_table(
    books: list[BookResponse],
    title: str = "Books",
    viewer_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Table:
    """Create a rich table for displaying books."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Genre")
    table.add_column("Owner")
    table.add_column("Status", style="yellow")

    for book in books:
        if book.borrower_id is not None:
            status = f"On Loan to {book.borrower_name or book.borrower_id}"
            if now is not None and viewer_id in (book.owner_id, book.borrower_id):
                status += f" (returns in {_days_left(book, now)} day(s))"
        else:
            status = book.status.value

        owner = book.owner_name or str(book.owner_id)
        if viewer_id is not None and book.owner_id == viewer_id:
            owner = "[bold]You[/bold]"

        table.add_row(str(book.id), book.title, book.author, book.genre, owner, status)

    return table


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info-level logs"),
) -> None:
    """Configure logging before any command runs."""
    configure_logging("INFO" if verbose else get_config().log_level)


# ============================================================================
# One-shot Commands
# ============================================================================


@app.command()
def books() -> None:
    """List every book and its lending status."""
    cl = get_app()
    rows = [cl.lending.to_book_response(b) for b in cl.lending.list_books()]
    if not rows:
        console.print("[dim]No books found[/dim]")
        return
    console.print(format_book_table(rows, title="All Books"))


@app.command()
def users() -> None:
    """List members with their trust score and ratings."""
    cl = get_app()

    table = Table(title="Members", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Trust Score", justify="center")
    table.add_column("Ratings", justify="center")

    for user in cl.db.list_users():
        ratings = user.get_ratings()
        rating_str = f"{user.average_rating} ({len(ratings)})" if ratings else "-"
        table.add_row(str(user.id), user.name, f"★ {user.trust_score}", rating_str)

    console.print(table)


@app.command()
def marketplace(
    name: str = typer.Option(..., "--as", "-u", help="Member name"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """Show the books a member could borrow right now."""
    cl = get_app()
    try:
        if not cl.login(name, password):
            print_error(LOGIN_FAILED)
            raise typer.Exit(1)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    rows = cl.marketplace()
    if not rows:
        console.print("[dim]Nothing available to borrow[/dim]")
        return
    console.print(format_book_table(rows, title="Marketplace", viewer_id=cl.current_user.id))


@app.command()
def sweep(
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep sweeping at the configured interval"),
    max_ticks: Optional[int] = typer.Option(None, "--max-ticks", help="Stop after N sweeps"),
) -> None:
    """Return every loan that is past its end date."""
    cl = get_app()

    def report(transactions) -> None:
        for t in transactions:
            console.print(f"Loan for '{t.book_title}' expired. Auto-returned.")
        if not transactions:
            print_info("No expired loans")

    if not watch:
        report(cl.sweeper.tick())
        return

    console.print(f"[dim]Sweeping every {cl.sweeper.interval:g}s (Ctrl+C to stop)...[/dim]")
    try:
        cl.sweeper.run_forever(max_ticks=max_ticks, on_tick=report)
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")


@app.command()
def summary(
    book_id: int = typer.Argument(..., help="Book ID to summarize"),
) -> None:
    """Generate an AI summary of a book."""
    cl = get_app()
    book = cl.lending.get_book(book_id)
    if book is None:
        print_error(f"Book {book_id} not found")
        raise typer.Exit(1)

    if not cl.config.has_summary_config():
        print_warning("GEMINI_API_KEY is not set")

    with console.status("[dim]Generating summary...[/dim]"):
        card = cl.summaries.toggle(book.id, book.title, book.author)

    if card.summary:
        console.print(Panel(card.summary, title=f"{book.title} by {book.author}"))
    else:
        print_error(card.error)
        raise typer.Exit(1)


# ============================================================================
# Interactive Shell
# ============================================================================

SHELL_HELP = """\
[bold]Account[/bold]
  login NAME PASSWORD      signup NAME PASSWORD      logout
[bold]Books[/bold]
  dashboard                marketplace               books
  add "TITLE" "AUTHOR" "GENRE"
  borrow BOOK_ID           return BOOK_ID            summary BOOK_ID
  history                  requests                  stats
[bold]Wishlist[/bold]
  wishlist                 wish TEXT                 unwish ENTRY_ID
[bold]Other[/bold]
  help                     quit"""


def _need_args(args: list[str], count: int, usage: str) -> bool:
    if len(args) < count:
        print_error(f"Usage: {usage}")
        return False
    return True


def _parse_id(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Not a valid ID: {value}")


def _shell_login(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 2, "login NAME PASSWORD"):
        return
    if cl.login(args[0], args[1]):
        print_success(f"Welcome back, {cl.current_user.name}!")
    else:
        print_error(LOGIN_FAILED)


def _shell_signup(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 2, "signup NAME PASSWORD"):
        return
    if cl.sign_up(args[0], args[1]):
        print_success(f"Account created. Welcome, {cl.current_user.name}!")
    else:
        print_error(SIGNUP_FAILED)


def _shell_logout(cl: CloudLeafApp, args: list[str]) -> None:
    cl.logout()
    print_info("Logged out.")


def _shell_dashboard(cl: CloudLeafApp, args: list[str]) -> None:
    dash = cl.dashboard()
    now = cl.clock()

    console.print(Panel(
        f"[bold]{dash.user.name}[/bold]  ★ {dash.user.trust_score} Trust Score",
        style="blue",
    ))

    if dash.wishlist_matches:
        console.print(format_book_table(
            dash.wishlist_matches, title="Wishlist Matches Found!", viewer_id=dash.user.id
        ))
        if dash.total_matches > len(dash.wishlist_matches):
            print_info(f"{dash.total_matches - len(dash.wishlist_matches)} more in the marketplace")

    console.print(format_book_table(
        dash.my_books, title=f"My Books ({len(dash.my_books)})", viewer_id=dash.user.id, now=now
    ))

    if dash.borrowed_books:
        console.print(format_book_table(
            dash.borrowed_books,
            title=f"Borrowed Books ({len(dash.borrowed_books)})",
            viewer_id=dash.user.id,
            now=now,
        ))
    else:
        print_info("You haven't borrowed any books yet.")

    _shell_wishlist(cl, [])


def _shell_marketplace(cl: CloudLeafApp, args: list[str]) -> None:
    rows = cl.marketplace()
    if not rows:
        console.print("[dim]Nothing available to borrow[/dim]")
        return
    console.print(format_book_table(rows, title="Marketplace", viewer_id=cl.current_user.id))


def _shell_books(cl: CloudLeafApp, args: list[str]) -> None:
    viewer = cl.current_user.id if cl.current_user else None
    rows = [cl.lending.to_book_response(b) for b in cl.lending.list_books()]
    console.print(format_book_table(rows, title="All Books", viewer_id=viewer, now=cl.clock()))


def _shell_add(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 3, 'add "TITLE" "AUTHOR" "GENRE"'):
        return
    book = cl.add_book(args[0], args[1], args[2])
    print_success(f"Added: {book.title} by {book.author} (#{book.id})")


def _shell_borrow(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 1, "borrow BOOK_ID"):
        return
    book = cl.borrow(_parse_id(args[0]))
    owner = cl.db.get_user(book.owner_id)
    print_success(
        f'Your request for "{book.title}" has been sent and auto-approved '
        f"by {owner.name if owner else 'the owner'}!"
    )
    print_info(f"Due back in {book.days_left(cl.clock())} day(s)")


def _shell_return(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 1, "return BOOK_ID"):
        return
    transaction = cl.return_book(_parse_id(args[0]))
    print_success(f"Returned: {transaction.book_title}")


def _shell_summary(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 1, "summary BOOK_ID"):
        return
    with console.status("[dim]Generating summary...[/dim]"):
        card = cl.toggle_summary(_parse_id(args[0]))

    if not card.expanded:
        print_info("Summary hidden.")
    elif card.summary:
        console.print(Panel(card.summary, title=card.title))
    elif card.error:
        print_error(card.error)


def _shell_history(cl: CloudLeafApp, args: list[str]) -> None:
    rows = cl.history()
    if not rows:
        console.print("[dim]No completed loans yet[/dim]")
        return

    table = Table(title="Loan History", show_header=True, header_style="bold magenta")
    table.add_column("Book", style="cyan", max_width=30)
    table.add_column("Lender")
    table.add_column("Borrower")
    table.add_column("Returned")
    table.add_column("How")

    for t in rows:
        table.add_row(
            t.book_title,
            t.lender_name or str(t.lender_id),
            t.borrower_name or str(t.borrower_id),
            t.return_date.strftime("%Y-%m-%d %H:%M"),
            "[yellow]expired[/yellow]" if t.auto_returned else "returned",
        )

    console.print(table)


def _shell_requests(cl: CloudLeafApp, args: list[str]) -> None:
    rows = cl.loan_requests()
    if not rows:
        console.print("[dim]No borrow requests yet[/dim]")
        return

    table = Table(title="My Requests", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Book", style="cyan", max_width=30)
    table.add_column("Requested")
    table.add_column("Status", style="yellow")

    for r in rows:
        table.add_row(
            str(r.id),
            r.book_title,
            r.created_at.strftime("%Y-%m-%d %H:%M"),
            r.status.value,
        )

    console.print(table)


def _shell_stats(cl: CloudLeafApp, args: list[str]) -> None:
    stats = cl.lending.get_stats()
    console.print(Panel(
        f"Books: {stats.total_books}  "
        f"Available: {stats.available_books}  "
        f"On loan: {stats.books_on_loan}\n"
        f"Requests: {stats.total_requests}  "
        f"Returns: {stats.total_transactions} ({stats.auto_returns} expired)",
        title="Lending Stats",
    ))


def _shell_wishlist(cl: CloudLeafApp, args: list[str]) -> None:
    user = cl.require_user()
    entries = cl.wishlist.list_entries(user.id)
    if not entries:
        console.print("[dim]Your wishlist is empty[/dim]")
        return

    table = Table(title="My Wishlist", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Looking for", style="cyan")
    for entry in entries:
        table.add_row(str(entry.id), entry.text)
    console.print(table)


def _shell_wish(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 1, "wish TEXT"):
        return
    entry = cl.add_wish(" ".join(args))
    print_success(f"Added to wishlist: {entry.text}")


def _shell_unwish(cl: CloudLeafApp, args: list[str]) -> None:
    if not _need_args(args, 1, "unwish ENTRY_ID"):
        return
    if cl.remove_wish(_parse_id(args[0])):
        print_success("Removed from wishlist")
    else:
        print_error("Wishlist entry not found")


ShellHandler = Callable[[CloudLeafApp, list[str]], None]

SHELL_COMMANDS: dict[str, ShellHandler] = {
    "login": _shell_login,
    "signup": _shell_signup,
    "logout": _shell_logout,
    "dashboard": _shell_dashboard,
    "marketplace": _shell_marketplace,
    "books": _shell_books,
    "add": _shell_add,
    "borrow": _shell_borrow,
    "return": _shell_return,
    "summary": _shell_summary,
    "history": _shell_history,
    "requests": _shell_requests,
    "stats": _shell_stats,
    "wishlist": _shell_wishlist,
    "wish": _shell_wish,
    "unwish": _shell_unwish,
}

# Commands that work without logging in
PUBLIC_COMMANDS = {"login", "signup", "books", "stats"}


def run_shell_command(cl: CloudLeafApp, line: str) -> bool:
    """Run one shell line. Returns False when the shell should exit."""
    # Expired loans come back before the user's action
    for t in cl.tick():
        print_info(f"Loan for '{t.book_title}' expired. Auto-returned.")

    try:
        parts = shlex.split(line)
    except ValueError as e:
        print_error(str(e))
        return True

    if not parts:
        return True

    command, args = parts[0].lower(), parts[1:]
    if command in ("quit", "exit"):
        return False
    if command == "help":
        console.print(SHELL_HELP)
        return True

    handler = SHELL_COMMANDS.get(command)
    if handler is None:
        print_error(f"Unknown command: {command} (try 'help')")
        return True

    if command not in PUBLIC_COMMANDS and cl.current_user is None:
        print_error("Please log in first.")
        return True

    try:
        handler(cl, args)
    except ValueError as e:
        print_error(str(e))

    return True


@app.command()
def shell() -> None:
    """Start an interactive lending session."""
    cl = get_app()
    console.print(Panel(
        "[bold]CloudLeaf[/bold]\nType 'help' for commands, 'quit' to leave.",
        style="blue",
    ))

    while True:
        user = cl.current_user
        prompt = f"[bold cyan]{user.name if user else 'guest'}@cloudleaf>[/bold cyan] "
        try:
            line = console.input(prompt)
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if not run_shell_command(cl, line):
            break

    print_info("Goodbye!")


# ============================================================================
# Version Command
# ============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"cloudleaf version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
