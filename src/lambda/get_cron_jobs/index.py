"""
Get Cron Jobs Lambda

Lists the registered recurring ingestion triggers (EventBridge rules whose
name starts with SCHEDULE_RULE_NAME) for the admin dashboard.

Output:
{
    "success": true,
    "jobs": [
        {
            "name": "scrape-obituaries-schedule",
            "schedule": "cron(33 13 * * ? *)",
            "active": true,
            "target_function": "scrape-obituaries",
            "target_sources": [],
            "raw_command": "{}"
        }
    ]
}
"""

import json
import logging
import os

from obituary_common.constants import DEFAULT_SCHEDULE_RULE_NAME
from obituary_common.exceptions import ScheduleError
from obituary_common.scheduler import EventBridgeTriggerRegistrar

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))


def lambda_handler(event, context):
    """
    Main Lambda handler - lists scheduled ingestion jobs.
    """
    if event.get("httpMethod") == "OPTIONS":
        return _response(200, {})

    registrar = EventBridgeTriggerRegistrar(
        target_arn=None,
        rule_name=os.environ.get("SCHEDULE_RULE_NAME") or DEFAULT_SCHEDULE_RULE_NAME,
    )

    try:
        jobs = registrar.list_jobs()
    except ScheduleError as e:
        logger.error(f"Error in get-cron-jobs: {e}")
        return _response(500, {"success": False, "error": str(e)})

    logger.info(f"Found {len(jobs)} scheduled jobs")
    return _response(200, {"success": True, "jobs": [job.to_dict() for job in jobs]})


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
        "body": json.dumps(body),
    }
