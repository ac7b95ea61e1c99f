"""
Logging helpers for the ingestion Lambdas.

Request events are reduced before logging: credential headers are masked
and an API Gateway body is logged as its decoded request fields, so the
admin token never reaches CloudWatch Logs while the requested sources stay
visible.
"""

import json
from typing import Any

# Header and field names compared in lower case
SENSITIVE_HEADERS = frozenset({"authorization", "x-api-key", "cookie"})
SENSITIVE_FIELD_PARTS = ("token", "secret", "password", "api_key", "apikey")

MAX_LOGGED_ERROR_LENGTH = 300


def _is_sensitive(key: str) -> bool:
    key = key.lower()
    return key in SENSITIVE_HEADERS or any(part in key for part in SENSITIVE_FIELD_PARTS)


def _mask(value: Any) -> str:
    # Long values keep a short prefix; short ones may be a whole credential
    if isinstance(value, str) and len(value) > 20:
        return f"{value[:6]}...({len(value)} chars)"
    return "***"


def _scrub(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: _mask(v) if _is_sensitive(str(k)) else _scrub(v) for k, v in value.items()
        }
    if isinstance(value, list):
        return [_scrub(item) for item in value]
    return value


def _describe_body(body: Any) -> Any:
    if not body:
        return body
    try:
        request = json.loads(body)
    except (TypeError, ValueError):
        return f"<{len(str(body))} chars, not JSON>"
    if isinstance(request, dict):
        return _scrub(request)
    return f"<JSON {type(request).__name__}>"


def safe_log_event(event: Any) -> dict[str, Any]:
    """
    Return a copy of a Lambda event that is safe to log.

    Example:
        logger.info(f"Scrape request: {safe_log_event(event)}")
        # {'httpMethod': 'POST', 'headers': {'Authorization': 'Bearer...(171 chars)'},
        #  'body': {'sources': ['augsburg']}}
    """
    if not isinstance(event, dict):
        return {"_raw": str(event)[:100]}

    safe = _scrub({k: v for k, v in event.items() if k != "body"})
    if "body" in event:
        safe["body"] = _describe_body(event["body"])
    return safe


def run_summary(operation: str, result, duration_ms: float, **fields: Any) -> dict[str, Any]:
    """
    Structured log record for a finished ingestion run.

    A run that collected any error is logged with ``success: False``; the
    first error is included so a failing source shows up without reading
    the full error list.

    Args:
        operation: Name of the run ("ingestion_run")
        result: IngestionResult of the run
        duration_ms: Wall time of the run
        **fields: Extra scalar fields, e.g. ``targets=12``
    """
    summary: dict[str, Any] = {
        "operation": operation,
        "success": not result.errors,
        "duration_ms": round(duration_ms, 2),
        "scraped": result.scraped,
        "inserted": result.inserted,
        "skipped": result.skipped,
        "error_count": len(result.errors),
    }
    if result.errors:
        summary["first_error"] = result.errors[0][:MAX_LOGGED_ERROR_LENGTH]
    summary.update(fields)
    return summary
