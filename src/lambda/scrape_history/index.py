"""
Scrape History Lambda

Per-source ingestion history for the admin dashboard. There is no run log;
counts are reconstructed from the created_at timestamps of stored obituaries.

Input event (from API Gateway):
{
    "httpMethod": "GET",
    "queryStringParameters": {"days": "30"}
}

Output:
{
    "success": true,
    "days": 30,
    "since": "2025-11-15T00:00:00+00:00",
    "total": 42,
    "last_run_at": "2025-12-15T13:33:05+00:00",
    "sources": [
        {"source": "Augsburger Allgemeine", "count": 12,
         "last_created_at": "...", "estimated_dates": 3}
    ]
}
"""

import json
import logging
import os
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from botocore.exceptions import ClientError

from obituary_common.config import ScraperSettingsManager
from obituary_common.constants import DEFAULT_HISTORY_DAYS, MAX_HISTORY_DAYS
from obituary_common.exceptions import StorageError
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
    Main Lambda handler - summarizes recent inserts per source.
    """
    if event.get("httpMethod") == "OPTIONS":
        return _response(200, {})

    obituaries_table = os.environ.get("OBITUARIES_TABLE")
    if not obituaries_table:
        return _response(500, {"success": False, "error": "OBITUARIES_TABLE not configured"})

    query_params = event.get("queryStringParameters") or {}
    try:
        days = _parse_days(query_params.get("days"))
    except ValueError as e:
        return _response(400, {"success": False, "error": str(e)})

    since = (datetime.now(UTC) - timedelta(days=days)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )

    try:
        sources = ObituaryStore(obituaries_table).summarize_by_source(since.isoformat())
    except StorageError as e:
        logger.error(f"Failed to load history: {e}")
        return _response(500, {"success": False, "error": "Failed to load history"})

    return _response(
        200,
        {
            "success": True,
            "days": days,
            "since": since.isoformat(),
            "total": sum(entry["count"] for entry in sources),
            "last_run_at": _last_run_at(),
            "sources": sources,
        },
    )


def _parse_days(raw) -> int:
    """Validate the days query parameter."""
    if raw is None or raw == "":
        return DEFAULT_HISTORY_DAYS
    try:
        days = int(raw)
    except (TypeError, ValueError) as e:
        raise ValueError("days must be an integer") from e
    if days < 1 or days > MAX_HISTORY_DAYS:
        raise ValueError(f"days must be between 1 and {MAX_HISTORY_DAYS}")
    return days


def _last_run_at() -> str | None:
    """Timestamp of the last completed run, None if unknown."""
    settings_table = os.environ.get("SETTINGS_TABLE")
    if not settings_table:
        return None
    try:
        return ScraperSettingsManager(settings_table).get_state().last_run_at
    except ClientError as e:
        logger.warning(f"Could not read last_run_at: {e}")
        return None


def _response(status_code: int, body: dict) -> dict:
    """Create API Gateway proxy response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET,OPTIONS",
            "Access-Control-Allow-Headers": "authorization,x-client-info,apikey,content-type",
        },
        "body": json.dumps(body, cls=DecimalEncoder),
    }
