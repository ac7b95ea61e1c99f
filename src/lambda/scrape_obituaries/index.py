"""
Scrape Obituaries Lambda

Runs one ingestion pass: fetches the selected obituary sources, extracts
candidate obituaries and inserts the ones not yet stored.

Input event (from API Gateway, JSON body):
{}                                                   # all sources
{"sources": ["augsburg", "faz"]}                     # selected sources
{"historical": {"sources": ["faz"], "months": ["januar-2025"]}}
{"sourceUrl": "https://...", "sourceName": "..."}    # one ad hoc page

Input event (from EventBridge schedule or direct invocation):
the same fields at the top level of the event.

Output:
{
    "success": true,
    "message": "Scraped 24 sources, inserted 3 new obituaries (12 already existed)",
    "details": {"scraped": 24, "inserted": 3, "skipped": 12, "errors": [...], "by_source": {...}}
}
"""

import json
import logging
import os
from decimal import Decimal

from obituary_common.config import ScraperSettingsManager
from obituary_common.constants import DEFAULT_REQUEST_DELAY_MS, FIRECRAWL_SCRAPE_URL
from obituary_common.exceptions import ConfigurationError
from obituary_common.logging_utils import safe_log_event
from obituary_common.scraper.coordinator import IngestionCoordinator
from obituary_common.scraper.dedup import DeduplicationService
from obituary_common.scraper.fetcher import FirecrawlFetcher
from obituary_common.storage import ObituaryStore

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal types from DynamoDB."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            if obj % 1 == 0:
                return int(obj)
            return float(obj)
        return super().default(obj)


def lambda_handler(event, context):
    """
    Main Lambda handler - routes API Gateway and direct invocations.
    """
    logger.info(f"Scrape request: {safe_log_event(event)}")

    is_api = "httpMethod" in event
    if is_api and event.get("httpMethod") == "OPTIONS":
        return _response(200, {})

    try:
        request = _parse_request(event) if is_api else event
    except ValueError as e:
        return _response(400, {"success": False, "error": str(e)})

    try:
        coordinator = _build_coordinator()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return _result(is_api, 500, {"success": False, "error": str(e)})

    try:
        source_url = request.get("sourceUrl")
        if source_url:
            result = coordinator.run_url(source_url, request.get("sourceName"))
        else:
            result = coordinator.run(
                sources=request.get("sources"),
                historical=request.get("historical"),
            )
    except ValueError as e:
        return _result(is_api, 400, {"success": False, "error": str(e)})
    except Exception as e:
        logger.error(f"Scraping failed: {e}", exc_info=True)
        return _result(is_api, 500, {"success": False, "error": str(e)})

    message = result.summary_message()
    logger.info(message)
    return _result(
        is_api,
        200,
        {"success": True, "message": message, "details": result.to_dict()},
    )


def _parse_request(event: dict) -> dict:
    """Decode the JSON body of an API Gateway event."""
    body = event.get("body")
    if not body:
        return {}
    try:
        request = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON body: {e}") from e
    if not isinstance(request, dict):
        raise ValueError("Request body must be a JSON object")
    return request


def _build_coordinator() -> IngestionCoordinator:
    """
    Wire the coordinator from environment variables.

    Raises:
        ConfigurationError: If the API key or the obituaries table is missing
    """
    obituaries_table = os.environ.get("OBITUARIES_TABLE")
    if not obituaries_table:
        raise ConfigurationError("OBITUARIES_TABLE environment variable required")

    fetcher = FirecrawlFetcher(
        api_key=os.environ.get("FIRECRAWL_API_KEY"),
        api_url=os.environ.get("FIRECRAWL_API_URL") or FIRECRAWL_SCRAPE_URL,
    )

    try:
        request_delay_ms = int(os.environ.get("REQUEST_DELAY_MS", DEFAULT_REQUEST_DELAY_MS))
    except ValueError as e:
        raise ConfigurationError(f"REQUEST_DELAY_MS must be an integer: {e}") from e

    settings_table = os.environ.get("SETTINGS_TABLE")
    settings = ScraperSettingsManager(settings_table) if settings_table else None

    return IngestionCoordinator(
        fetcher=fetcher,
        store=ObituaryStore(obituaries_table),
        dedup=DeduplicationService(obituaries_table),
        settings=settings,
        request_delay_ms=request_delay_ms,
    )


def _result(is_api: bool, status_code: int, body: dict) -> dict:
    """Proxy response for API Gateway, the plain body otherwise."""
    if is_api:
        return _response(status_code, body)
    return body


def _response(status_code: int, body: dict) -> dict:
    """Create API Gateway proxy response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "POST,OPTIONS",
            "Access-Control-Allow-Headers": "authorization,x-client-info,apikey,content-type",
        },
        "body": json.dumps(body, cls=DecimalEncoder),
    }
