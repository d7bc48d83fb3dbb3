"""Tests for the Gemini text-generation client."""

from unittest.mock import MagicMock

import pytest
import requests

from cloudleaf.api import GeminiClient, TextGenerationError, TextGenerationRateLimitError


def make_response(json_data=None, status_code=200, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


@pytest.fixture
def client():
    """Create a client with a mocked HTTP session."""
    c = GeminiClient(api_key="test-key", model="gemini-2.5-flash", timeout=5)
    c._session = MagicMock()
    return c


class TestGeminiClientInit:
    """Tests for client construction."""

    def test_endpoint(self):
        """Test the generateContent URL for the model."""
        client = GeminiClient(api_key="k", model="gemini-2.5-flash")
        assert client.endpoint == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-2.5-flash:generateContent"
        )

    def test_session_headers(self):
        """Test the session sends JSON."""
        client = GeminiClient(api_key="k")
        assert client._session.headers["Content-Type"] == "application/json"


class TestGenerate:
    """Tests for generate."""

    def test_generate_success(self, client):
        """Test text is taken from the first candidate."""
        client._session.post.return_value = make_response({
            "candidates": [{"content": {"parts": [{"text": "A whale "}, {"text": "story."}]}}]
        })

        assert client.generate("Summarize Moby Dick") == "A whale story."

        _, kwargs = client._session.post.call_args
        assert kwargs["json"] == {"contents": [{"parts": [{"text": "Summarize Moby Dick"}]}]}
        assert kwargs["headers"] == {"x-goog-api-key": "test-key"}
        assert kwargs["timeout"] == 5

    def test_no_api_key(self):
        """Test a missing key fails before any request."""
        client = GeminiClient(api_key=None)
        client._session = MagicMock()

        with pytest.raises(TextGenerationError, match="No API key"):
            client.generate("prompt")
        client._session.post.assert_not_called()

    def test_empty_candidates(self, client):
        """Test a response without text is an error."""
        client._session.post.return_value = make_response({"candidates": []})

        with pytest.raises(TextGenerationError, match="no text"):
            client.generate("prompt")

    def test_rate_limited(self, client):
        """Test HTTP 429 maps to the rate-limit error."""
        client._session.post.return_value = make_response(status_code=429)

        with pytest.raises(TextGenerationRateLimitError):
            client.generate("prompt")

    def test_http_error(self, client):
        """Test other HTTP errors."""
        client._session.post.return_value = make_response(status_code=500)

        with pytest.raises(TextGenerationError, match="500"):
            client.generate("prompt")

    def test_timeout(self, client):
        """Test request timeouts."""
        client._session.post.side_effect = requests.exceptions.Timeout()

        with pytest.raises(TextGenerationError, match="timed out"):
            client.generate("prompt")

    def test_connection_error(self, client):
        """Test network failures."""
        client._session.post.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(TextGenerationError, match="Request failed"):
            client.generate("prompt")

    def test_invalid_json(self, client):
        """Test an unparseable body."""
        client._session.post.return_value = make_response(json_error=ValueError("bad"))

        with pytest.raises(TextGenerationError, match="Invalid JSON"):
            client.generate("prompt")

    def test_invalid_json_from_real_response(self, client):
        """Test a non-JSON body on a real requests Response."""
        response = requests.Response()
        response.status_code = 200
        response._content = b"not json"
        client._session.post.return_value = response

        with pytest.raises(TextGenerationError, match="Invalid JSON in response"):
            client.generate("prompt")

    def test_invalid_url(self):
        """Test request errors that are also ValueErrors keep their message."""
        client = GeminiClient(api_key="k")
        client.BASE_URL = "not a url"

        with pytest.raises(TextGenerationError, match="Request failed"):
            client.generate("prompt")


class TestExtractText:
    """Tests for _extract_text."""

    def test_missing_content(self):
        """Test candidates without content."""
        assert GeminiClient._extract_text({"candidates": [{}]}) == ""

    def test_missing_candidates(self):
        """Test a body with no candidates key."""
        assert GeminiClient._extract_text({}) == ""
