"""Unit tests for the Firecrawl fetcher."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from obituary_common.exceptions import ConfigurationError
from obituary_common.scraper.fetcher import (
    FetchError,
    FetchOptions,
    FirecrawlFetcher,
    parse_scrape_response,
)


def _mock_client(mock_client_class, response=None, side_effect=None):
    mock_client = MagicMock()
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = response
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    mock_client_class.return_value = mock_client
    return mock_client


def _response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.text = text
    response.json.return_value = json_data if json_data is not None else {}
    return response


class TestFetchError:
    """Tests for FetchError exception."""

    def test_error_message(self):
        error = FetchError("https://example.de", "Payment required")
        assert "https://example.de" in str(error)
        assert "Payment required" in str(error)
        assert error.url == "https://example.de"
        assert error.message == "Payment required"

    def test_with_status_code(self):
        error = FetchError("https://example.de", "Not found", status_code=404)
        assert error.status_code == 404


class TestFetchOptions:
    """Tests for FetchOptions payloads."""

    def test_default_payload(self):
        payload = FetchOptions().to_payload("https://trauer.example.de")
        assert payload == {
            "url": "https://trauer.example.de",
            "formats": ["markdown"],
            "onlyMainContent": True,
            "waitFor": 3000,
            "location": {"country": "DE", "languages": ["de"]},
        }

    def test_custom_formats(self):
        payload = FetchOptions(formats=["markdown", "html"], wait_for_ms=0).to_payload("u")
        assert payload["formats"] == ["markdown", "html"]
        assert payload["waitFor"] == 0


class TestParseScrapeResponse:
    """Tests for parse_scrape_response."""

    def test_nested_data(self):
        result = parse_scrape_response(
            "https://x.de",
            {"success": True, "data": {"markdown": "# Hi", "metadata": {"title": "T"}}},
        )
        assert result.markdown == "# Hi"
        assert result.metadata == {"title": "T"}
        assert result.html is None

    def test_top_level_markdown(self):
        result = parse_scrape_response("https://x.de", {"markdown": "**Anna Klein**"})
        assert result.markdown == "**Anna Klein**"

    def test_missing_markdown_is_empty(self):
        result = parse_scrape_response("https://x.de", {"success": True, "data": {}})
        assert result.markdown == ""


class TestFirecrawlFetcher:
    """Tests for FirecrawlFetcher class."""

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError, match="API key not configured"):
            FirecrawlFetcher(api_key=None)

    def test_empty_api_key(self):
        with pytest.raises(ConfigurationError):
            FirecrawlFetcher(api_key="")

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_successful_fetch(self, mock_client_class):
        """Test successful scrape returns markdown."""
        mock_client = _mock_client(
            mock_client_class,
            _response(200, {"success": True, "data": {"markdown": "## Erika Schmidt"}}),
        )

        fetcher = FirecrawlFetcher(api_key="fc-test", api_url="https://fc.example/v1/scrape")
        result = fetcher.fetch("https://trauer.example.de")

        assert result.url == "https://trauer.example.de"
        assert result.markdown == "## Erika Schmidt"

        args, kwargs = mock_client.post.call_args
        assert args[0] == "https://fc.example/v1/scrape"
        assert kwargs["headers"]["Authorization"] == "Bearer fc-test"
        assert kwargs["json"]["url"] == "https://trauer.example.de"
        assert kwargs["json"]["location"] == {"country": "DE", "languages": ["de"]}

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_timeout_passed_to_client(self, mock_client_class):
        _mock_client(mock_client_class, _response(200, {"data": {"markdown": ""}}))

        FirecrawlFetcher(api_key="fc-test", timeout=12.5).fetch("https://x.de")

        assert mock_client_class.call_args[1]["timeout"] == 12.5

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_non_success_carries_body(self, mock_client_class):
        """Test that a non-2xx response raises with the response body."""
        _mock_client(mock_client_class, _response(402, text='{"error":"Insufficient credits"}'))

        fetcher = FirecrawlFetcher(api_key="fc-test")
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch("https://x.de")

        assert exc_info.value.status_code == 402
        assert "Insufficient credits" in exc_info.value.message

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_non_success_without_body(self, mock_client_class):
        _mock_client(mock_client_class, _response(500, text=""))

        with pytest.raises(FetchError, match="HTTP 500"):
            FirecrawlFetcher(api_key="fc-test").fetch("https://x.de")

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_no_retry(self, mock_client_class):
        mock_client = _mock_client(mock_client_class, _response(503, text="unavailable"))

        with pytest.raises(FetchError):
            FirecrawlFetcher(api_key="fc-test").fetch("https://x.de")

        assert mock_client.post.call_count == 1

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_timeout_handling(self, mock_client_class):
        _mock_client(mock_client_class, side_effect=httpx.TimeoutException("timed out"))

        with pytest.raises(FetchError, match="Timeout"):
            FirecrawlFetcher(api_key="fc-test").fetch("https://x.de")

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_connection_error(self, mock_client_class):
        _mock_client(mock_client_class, side_effect=httpx.ConnectError("refused"))

        with pytest.raises(FetchError, match="Request error"):
            FirecrawlFetcher(api_key="fc-test").fetch("https://x.de")

    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_invalid_json(self, mock_client_class):
        response = _response(200)
        response.json.side_effect = ValueError("Expecting value")
        _mock_client(mock_client_class, response)

        with pytest.raises(FetchError, match="Invalid JSON"):
            FirecrawlFetcher(api_key="fc-test").fetch("https://x.de")

    @pytest.mark.parametrize("body", [None, [], "ok"])
    @patch("obituary_common.scraper.fetcher.httpx.Client")
    def test_non_object_body(self, mock_client_class, body):
        """Test that a 200 response whose JSON is not an object raises FetchError."""
        response = _response(200)
        response.json.return_value = body
        _mock_client(mock_client_class, response)

        with pytest.raises(FetchError, match="Unexpected response body") as exc_info:
            FirecrawlFetcher(api_key="fc-test").fetch("https://x.de")

        assert exc_info.value.status_code == 200
