"""
Update Cron Schedule Lambda

Changes or toggles the recurring ingestion trigger (an EventBridge rule
targeting the scrape_obituaries Lambda).

Input event (from API Gateway, JSON body):
{"cron_interval": "0 6 * * *"}     # replace the schedule and activate it
{"is_active": false}               # pause
{"is_active": true}                # resume with the stored schedule

A GET request returns the current state without changing it.

Output:
{
    "success": true,
    "message": "Cron schedule updated to: 0 6 * * *",
    "state": {"cron_expression": "0 6 * * *", "is_active": true, ...}
}
"""

import json
import logging
import os
from decimal import Decimal

from obituary_common.config import ScraperSettingsManager
from obituary_common.constants import DEFAULT_CRON_EXPRESSION, DEFAULT_SCHEDULE_RULE_NAME
from obituary_common.exceptions import InvalidCronExpressionError, ScheduleError
from obituary_common.logging_utils import safe_log_event
from obituary_common.scheduler import EventBridgeTriggerRegistrar, ScheduleController

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
    Main Lambda handler - updates or toggles the ingestion schedule.
    """
    logger.info(f"Schedule request: {safe_log_event(event)}")

    method = event.get("httpMethod")
    if method == "OPTIONS":
        return _response(200, {})

    try:
        controller = _build_controller()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return _response(500, {"success": False, "error": str(e)})

    try:
        if method == "GET":
            state = controller.get_state()
            return _response(200, {"success": True, "state": state.to_dict()})

        try:
            request = _parse_request(event)
        except ValueError as e:
            return _response(400, {"success": False, "error": str(e)})

        cron_interval = request.get("cron_interval")
        is_active = request.get("is_active")

        if cron_interval is not None:
            if not isinstance(cron_interval, str):
                return _response(400, {"success": False, "error": "cron_interval must be a string"})
            state = controller.set_schedule(cron_interval)
            message = f"Cron schedule updated to: {state.cron_expression}"
        elif is_active is not None:
            if not isinstance(is_active, bool):
                return _response(400, {"success": False, "error": "is_active must be a boolean"})
            state = controller.set_active(is_active)
            message = f"Cron job {'activated' if is_active else 'deactivated'}"
        else:
            return _response(
                400, {"success": False, "error": "cron_interval or is_active is required"}
            )

    except InvalidCronExpressionError as e:
        logger.warning(f"Rejected cron expression: {e}")
        return _response(400, {"success": False, "error": str(e)})
    except ScheduleError as e:
        logger.error(f"Schedule update failed: {e}")
        return _response(500, {"success": False, "error": str(e)})
    except Exception as e:
        logger.error(f"Error updating schedule: {e}", exc_info=True)
        return _response(500, {"success": False, "error": "Internal server error"})

    logger.info(message)
    return _response(200, {"success": True, "message": message, "state": state.to_dict()})


def _parse_request(event: dict) -> dict:
    """Decode the JSON body of an API Gateway event, or use a direct event as is."""
    if "httpMethod" not in event:
        return event
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


def _build_controller() -> ScheduleController:
    """
    Wire the controller from environment variables.

    Raises:
        ValueError: If SETTINGS_TABLE is not set
    """
    registrar = EventBridgeTriggerRegistrar(
        target_arn=os.environ.get("SCRAPE_FUNCTION_ARN"),
        rule_name=os.environ.get("SCHEDULE_RULE_NAME") or DEFAULT_SCHEDULE_RULE_NAME,
    )
    return ScheduleController(
        settings=ScraperSettingsManager(),
        registrar=registrar,
        default_cron=DEFAULT_CRON_EXPRESSION,
    )


def _response(status_code: int, body: dict) -> dict:
    """Create API Gateway proxy response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
            "Access-Control-Allow-Headers": "authorization,x-client-info,apikey,content-type",
        },
        "body": json.dumps(body, cls=DecimalEncoder),
    }
