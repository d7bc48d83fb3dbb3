"""AI book summaries, cached per book card for the session."""

from .assistant import (
    SUMMARY_ERROR,
    SummaryAssistant,
    SummaryCard,
    TextGenerator,
    build_summary_prompt,
)

__all__ = [
    "SummaryAssistant",
    "SummaryCard",
    "TextGenerator",
    "SUMMARY_ERROR",
    "build_summary_prompt",
]
