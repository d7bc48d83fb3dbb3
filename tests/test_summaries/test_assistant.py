"""Tests for the summary assistant."""

from cloudleaf.api import GeminiClient, TextGenerationError
from cloudleaf.summaries import (
    SUMMARY_ERROR,
    SummaryAssistant,
    SummaryCard,
    build_summary_prompt,
)


def test_build_summary_prompt():
    """Test the prompt names the book and author."""
    assert build_summary_prompt("Moby Dick", "Herman Melville") == (
        'Provide a concise, one-paragraph summary for the public domain book '
        '"Moby Dick" by Herman Melville.'
    )


class TestSummaryCard:
    """Tests for a single card."""

    def test_first_expand_generates(self, fake_generator):
        """Test the first expansion fetches and shows the summary."""
        card = SummaryCard(1, "Moby Dick", "Herman Melville", fake_generator)

        card.toggle()

        assert card.expanded
        assert card.summary == "A whale of a tale."
        assert card.display == "A whale of a tale."
        assert fake_generator.prompts == [build_summary_prompt("Moby Dick", "Herman Melville")]

    def test_collapse_and_reexpand_uses_cache(self, fake_generator):
        """Test later expansions do not call the generator again."""
        card = SummaryCard(1, "Moby Dick", "Herman Melville", fake_generator)

        card.toggle()
        card.toggle()
        assert not card.expanded
        assert card.display is None

        card.toggle()
        assert card.expanded
        assert len(fake_generator.prompts) == 1

    def test_failure_shows_error(self, make_generator, caplog):
        """Test a failed request shows the generic message and logs."""
        generator = make_generator(TextGenerationError("HTTP error: 500"))
        card = SummaryCard(1, "Moby Dick", "Herman Melville", generator)

        card.toggle()

        assert card.expanded
        assert card.summary == ""
        assert card.error == SUMMARY_ERROR
        assert card.display == "Could not generate summary."
        assert not card.loading
        assert "Error generating summary for book 1" in caplog.text

    def test_retry_after_failure(self, make_generator):
        """Test a failed card retries on the next expansion."""
        generator = make_generator(RuntimeError("boom"), "Second try.")
        card = SummaryCard(1, "Moby Dick", "Herman Melville", generator)

        card.toggle()
        card.toggle()
        card.toggle()

        assert card.summary == "Second try."
        assert card.error == ""
        assert card.attempts == 2

    def test_toggle_ignored_while_loading(self, fake_generator):
        """Test toggling during a request does nothing."""
        card = SummaryCard(1, "Moby Dick", "Herman Melville", fake_generator)
        card.loading = True

        card.toggle()

        assert not card.expanded
        assert fake_generator.prompts == []


class TestSummaryAssistant:
    """Tests for the per-session card cache."""

    def test_cards_are_per_book(self, fake_generator):
        """Test each book gets its own card."""
        assistant = SummaryAssistant(fake_generator)

        a = assistant.card_for(1, "Moby Dick", "Herman Melville")
        b = assistant.card_for(2, "Dracula", "Bram Stoker")

        assert a is assistant.card_for(1, "Moby Dick", "Herman Melville")
        assert a is not b

    def test_cached_summary(self, fake_generator):
        """Test the summary is kept after the first toggle."""
        assistant = SummaryAssistant(fake_generator)
        assert assistant.cached_summary(1) is None

        assistant.toggle(1, "Moby Dick", "Herman Melville")
        assert assistant.cached_summary(1) == "A whale of a tale."

    def test_clear(self, fake_generator):
        """Test clearing drops the cache."""
        assistant = SummaryAssistant(fake_generator)
        assistant.toggle(1, "Moby Dick", "Herman Melville")

        assistant.clear()

        assert assistant.cached_summary(1) is None

    def test_from_config(self, config):
        """Test the default generator is a configured Gemini client."""
        config.gemini_api_key = "abc"
        config.summary_model = "gemini-test"

        assistant = SummaryAssistant.from_config(config)

        assert isinstance(assistant.generator, GeminiClient)
        assert assistant.generator.api_key == "abc"
        assert assistant.generator.model == "gemini-test"

    def test_no_api_key_shows_error(self, config):
        """Test a missing key surfaces as the generic card error."""
        assistant = SummaryAssistant.from_config(config)

        card = assistant.toggle(1, "Moby Dick", "Herman Melville")

        assert card.error == SUMMARY_ERROR
