"""Gemini text-generation client.

Sends a single prompt to the Generative Language REST API and returns the
generated text. Used for book summaries.

Requires an API key (GEMINI_API_KEY).
"""

from typing import Optional

import requests


class TextGenerationError(Exception):
    """Base exception for text-generation errors."""

    pass


class TextGenerationRateLimitError(TextGenerationError):
    """Raised when rate limited by the text-generation service."""

    pass


class GeminiClient:
    """Client for the Gemini generateContent endpoint."""

    BASE_URL = "https://generativelanguage.googleapis.com"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash",
        timeout: int = 30,
    ):
        """Initialize client.

        Args:
            api_key: API key for the Generative Language API
            model: Model identifier
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": "CloudLeaf/0.1",
            "Content-Type": "application/json",
        })

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/v1beta/models/{self.model}:generateContent"

    def _post(self, payload: dict) -> dict:
        """Make POST request with error handling."""
        if not self.api_key:
            raise TextGenerationError("No API key configured (set GEMINI_API_KEY)")

        try:
            response = self._session.post(
                self.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout:
            raise TextGenerationError("Request timed out")
        except requests.exceptions.HTTPError as e:
            if e.response.status_code == 429:
                raise TextGenerationRateLimitError("Rate limited by text-generation service")
            raise TextGenerationError(f"HTTP error: {e.response.status_code}")
        except requests.exceptions.JSONDecodeError:
            # Also a RequestException, so it must come first
            raise TextGenerationError("Invalid JSON in response")
        except requests.exceptions.RequestException as e:
            raise TextGenerationError(f"Request failed: {e}")
        except ValueError:
            raise TextGenerationError("Invalid JSON in response")

    def generate(self, prompt: str) -> str:
        """Generate text for a prompt.

        Args:
            prompt: Prompt text

        Returns:
            Generated text

        Raises:
            TextGenerationError: Request failed or returned no text
        """
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        data = self._post(payload)
        text = self._extract_text(data)
        if not text:
            raise TextGenerationError("Response contained no text")
        return text

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Join the text parts of the first candidate."""
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts).strip()
