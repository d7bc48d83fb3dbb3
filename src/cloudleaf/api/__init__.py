"""API module for external services.

Provides the text-generation client used for book summaries.
"""

from .gemini import (
    GeminiClient,
    TextGenerationError,
    TextGenerationRateLimitError,
)

__all__ = [
    "GeminiClient",
    "TextGenerationError",
    "TextGenerationRateLimitError",
]
