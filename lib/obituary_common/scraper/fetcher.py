"""
Page fetching through the Firecrawl scrape API.

The API renders the target page and returns it as markdown (and optionally
HTML). No parsing happens here and nothing is retried: a failed call is
reported to the caller, which decides how to continue.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from obituary_common.constants import (
    FETCH_COUNTRY,
    FETCH_LANGUAGES,
    FETCH_TIMEOUT,
    FETCH_WAIT_FOR_MS,
    FIRECRAWL_SCRAPE_URL,
)
from obituary_common.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Error during page fetching."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.message = message
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {message}")


@dataclass
class FetchOptions:
    """
    Options forwarded to the scrape API.

    Attributes:
        formats: Output formats to request ("markdown", "html")
        only_main_content: Strip navigation and other boilerplate
        wait_for_ms: Time to let dynamic content settle before capture
        country: Country hint so region-specific content is returned
        languages: Preferred content languages
    """

    formats: list[str] = field(default_factory=lambda: ["markdown"])
    only_main_content: bool = True
    wait_for_ms: int = FETCH_WAIT_FOR_MS
    country: str = FETCH_COUNTRY
    languages: list[str] = field(default_factory=lambda: list(FETCH_LANGUAGES))

    def to_payload(self, url: str) -> dict[str, Any]:
        return {
            "url": url,
            "formats": list(self.formats),
            "onlyMainContent": self.only_main_content,
            "waitFor": self.wait_for_ms,
            "location": {"country": self.country, "languages": list(self.languages)},
        }


@dataclass
class FetchResult:
    """Rendered content of one page."""

    url: str
    markdown: str = ""
    html: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class FirecrawlFetcher:
    """Client for the Firecrawl scrape endpoint."""

    def __init__(
        self,
        api_key: str | None,
        api_url: str = FIRECRAWL_SCRAPE_URL,
        timeout: float = FETCH_TIMEOUT,
        options: FetchOptions | None = None,
    ):
        """
        Initialize fetcher.

        Args:
            api_key: Firecrawl API key (bearer token)
            api_url: Scrape endpoint
            timeout: Request timeout in seconds
            options: Default fetch options

        Raises:
            ConfigurationError: If no API key is given
        """
        if not api_key:
            raise ConfigurationError("Firecrawl API key not configured")
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.options = options or FetchOptions()

    def fetch(self, url: str, options: FetchOptions | None = None) -> FetchResult:
        """
        Scrape one URL.

        Args:
            url: Page to scrape
            options: Per-call options, defaults to the fetcher's options

        Returns:
            FetchResult with markdown (empty string if none was returned)

        Raises:
            FetchError: On network errors or any non-success response; the
                message carries the response body text
        """
        payload = (options or self.options).to_payload(url)
        logger.info(f"Scraping: {url}")

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.TimeoutException as e:
            raise FetchError(url, f"Timeout: {e}") from e
        except httpx.RequestError as e:
            raise FetchError(url, f"Request error: {e}") from e

        if not response.is_success:
            body = response.text
            logger.error(f"Scrape failed for {url} (status={response.status_code}): {body[:500]}")
            raise FetchError(url, body or f"HTTP {response.status_code}", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(url, f"Invalid JSON response: {e}", response.status_code) from e

        if not isinstance(data, dict):
            raise FetchError(url, "Unexpected response body", response.status_code)

        return parse_scrape_response(url, data)


def parse_scrape_response(url: str, data: dict[str, Any]) -> FetchResult:
    """
    Build a FetchResult from a scrape API response body.

    Accepts both ``{"data": {"markdown": ...}}`` and a top-level ``markdown``.
    """
    content = data.get("data") if isinstance(data.get("data"), dict) else data
    markdown = content.get("markdown") or data.get("markdown") or ""
    return FetchResult(
        url=url,
        markdown=markdown,
        html=content.get("html"),
        metadata=content.get("metadata") or {},
    )
