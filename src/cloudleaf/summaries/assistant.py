"""Book summaries from a text-generation service.

Each book card gets a :class:`SummaryCard` for the session. The first time
a card is expanded it asks the generator for a summary and keeps the text
until the session ends; a failure shows a generic message and the next
expansion tries again.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..config import Config, get_config

logger = logging.getLogger(__name__)

SUMMARY_ERROR = "Could not generate summary."

PROMPT_TEMPLATE = (
    'Provide a concise, one-paragraph summary for the public domain book '
    '"{title}" by {author}.'
)


class TextGenerator(Protocol):
    """Anything that turns a prompt into text."""

    def generate(self, prompt: str) -> str: ...


def build_summary_prompt(title: str, author: str) -> str:
    """Build the summary prompt for a book."""
    return PROMPT_TEMPLATE.format(title=title, author=author)


@dataclass
class SummaryCard:
    """Summary state for one book card."""

    book_id: int
    title: str
    author: str
    generator: TextGenerator = field(repr=False)

    expanded: bool = False
    loading: bool = False
    summary: str = ""
    error: str = ""
    attempts: int = 0

    @property
    def prompt(self) -> str:
        return build_summary_prompt(self.title, self.author)

    def toggle(self) -> "SummaryCard":
        """Show or hide the summary, generating it on first show.

        Ignored while a request is in flight.
        """
        if self.loading:
            return self

        if not self.summary and not self.expanded:
            self._generate()
        self.expanded = not self.expanded
        return self

    def _generate(self) -> None:
        self.loading = True
        self.error = ""
        self.attempts += 1
        try:
            self.summary = self.generator.generate(self.prompt)
        except Exception:
            logger.exception("Error generating summary for book %s", self.book_id)
            self.error = SUMMARY_ERROR
        finally:
            self.loading = False

    @property
    def display(self) -> Optional[str]:
        """What the expanded card shows, or None when collapsed."""
        if not self.expanded:
            return None
        if self.summary:
            return self.summary
        if self.error:
            return self.error
        return None


class SummaryAssistant:
    """Keeps the summary cards of the current session."""

    def __init__(self, generator: TextGenerator):
        """Initialize the assistant.

        Args:
            generator: Text-generation client
        """
        self.generator = generator
        self._cards: dict[int, SummaryCard] = {}

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "SummaryAssistant":
        """Build an assistant backed by the configured Gemini model."""
        from ..api import GeminiClient

        config = config or get_config()
        return cls(
            GeminiClient(
                api_key=config.gemini_api_key,
                model=config.summary_model,
                timeout=config.summary_timeout,
            )
        )

    def card_for(self, book_id: int, title: str, author: str) -> SummaryCard:
        """Get the card for a book, creating it on first use."""
        card = self._cards.get(book_id)
        if card is None:
            card = SummaryCard(book_id, title, author, self.generator)
            self._cards[book_id] = card
        return card

    def toggle(self, book_id: int, title: str, author: str) -> SummaryCard:
        """Toggle a book's summary card."""
        return self.card_for(book_id, title, author).toggle()

    def cached_summary(self, book_id: int) -> Optional[str]:
        card = self._cards.get(book_id)
        return card.summary if card and card.summary else None

    def clear(self) -> None:
        """Drop every card (the session ended)."""
        self._cards.clear()
