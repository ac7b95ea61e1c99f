"""
Recurring ingestion schedule.

The schedule is an Amazon EventBridge rule that invokes the ingestion
Lambda with an empty input (all sources). ``ScheduleController`` owns the
Active/Paused state machine and keeps the persisted ScheduleState in sync
with the registered rule.
"""

import json
import logging
import re

import boto3
from botocore.exceptions import ClientError

from obituary_common.config import ScraperSettingsManager
from obituary_common.constants import (
    DEFAULT_CRON_EXPRESSION,
    DEFAULT_SCHEDULE_RULE_NAME,
    RAW_COMMAND_PREVIEW_LENGTH,
)
from obituary_common.exceptions import InvalidCronExpressionError, ScheduleError
from obituary_common.scraper.models import ScheduledJob, ScheduleState

logger = logging.getLogger(__name__)

TARGET_ID = "scrape-obituaries"

# Weekday numbers not preceded by "/" (step values stay as they are)
_WEEKDAY_NUMBER_RE = re.compile(r"(?<![/\d])\d+")


def validate_cron(expression: str) -> list[str]:
    """
    Check that a cron expression has exactly five fields.

    Args:
        expression: Cron expression ("min hour day-of-month month day-of-week")

    Returns:
        The five fields

    Raises:
        InvalidCronExpressionError: If the field count is wrong
    """
    fields = (expression or "").split()
    if len(fields) != 5:
        raise InvalidCronExpressionError(expression)
    return fields


def to_eventbridge_schedule(expression: str) -> str:
    """
    Translate a 5-field cron expression to an EventBridge schedule.

    EventBridge cron has a year field, needs ``?`` in one of day-of-month and
    day-of-week, and numbers weekdays 1-7 starting on Sunday.

    Example:
        to_eventbridge_schedule("30 2 * * 1-5")  # "cron(30 2 ? * 2-6 *)"

    Raises:
        InvalidCronExpressionError: If the expression cannot be expressed in EventBridge
    """
    minute, hour, day_of_month, month, day_of_week = validate_cron(expression)

    if day_of_week in ("*", "?"):
        day_of_week = "?"
        if day_of_month == "?":
            day_of_month = "*"
    elif day_of_month in ("*", "?"):
        day_of_month = "?"
        day_of_week = _WEEKDAY_NUMBER_RE.sub(
            lambda m: str(int(m.group()) % 7 + 1), day_of_week
        )
    else:
        raise InvalidCronExpressionError(
            expression, "day-of-month and day-of-week cannot both be restricted"
        )

    return f"cron({minute} {hour} {day_of_month} {month} {day_of_week} *)"


class EventBridgeTriggerRegistrar:
    """Registers the recurring ingestion trigger as an EventBridge rule."""

    def __init__(
        self,
        target_arn: str | None,
        rule_name: str = DEFAULT_SCHEDULE_RULE_NAME,
        target_input: dict | None = None,
        region_name: str | None = None,
    ):
        """
        Initialize registrar.

        Args:
            target_arn: ARN of the ingestion Lambda; only required for register()
            rule_name: EventBridge rule name, also the prefix used by list_jobs()
            target_input: Event passed to the Lambda (empty: all sources)
            region_name: Optional AWS region name
        """
        self.events = boto3.client("events", region_name=region_name)
        self.target_arn = target_arn
        self.rule_name = rule_name
        self.target_input = target_input or {}

    def register(self, cron_expression: str) -> str:
        """
        Create or replace the rule and point it at the ingestion Lambda.

        Args:
            cron_expression: 5-field cron expression

        Returns:
            The rule ARN

        Raises:
            InvalidCronExpressionError: If the expression is malformed
            ScheduleError: If EventBridge rejects the rule or target
        """
        if not self.target_arn:
            raise ScheduleError("SCRAPE_FUNCTION_ARN is not configured")

        schedule = to_eventbridge_schedule(cron_expression)
        try:
            response = self.events.put_rule(
                Name=self.rule_name,
                ScheduleExpression=schedule,
                State="ENABLED",
                Description=f"Obituary ingestion ({cron_expression})",
            )
            self.events.put_targets(
                Rule=self.rule_name,
                Targets=[
                    {
                        "Id": TARGET_ID,
                        "Arn": self.target_arn,
                        "Input": json.dumps(self.target_input),
                    }
                ],
            )
        except ClientError as e:
            logger.error(f"Error scheduling job: {e}")
            raise ScheduleError(f"Failed to schedule cron job: {e}") from e

        logger.info(f"Registered {self.rule_name} with schedule {schedule}")
        return response["RuleArn"]

    def unregister(self) -> bool:
        """
        Remove the rule and its target.

        Returns:
            True if a rule was removed, False if none existed

        Raises:
            ScheduleError: If EventBridge fails for another reason
        """
        try:
            self.events.remove_targets(Rule=self.rule_name, Ids=[TARGET_ID])
            self.events.delete_rule(Name=self.rule_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ResourceNotFoundException":
                logger.info(f"No existing rule {self.rule_name} to remove")
                return False
            raise ScheduleError(f"Failed to unschedule cron job: {e}") from e

        logger.info(f"Removed rule {self.rule_name}")
        return True

    def list_jobs(self) -> list[ScheduledJob]:
        """
        List registered rules sharing the configured rule name prefix.

        Raises:
            ScheduleError: If the rules cannot be listed
        """
        jobs = []
        try:
            paginator = self.events.get_paginator("list_rules")
            for page in paginator.paginate(NamePrefix=self.rule_name):
                for rule in page.get("Rules", []):
                    targets = self.events.list_targets_by_rule(Rule=rule["Name"]).get("Targets", [])
                    jobs.append(_describe_rule(rule, targets))
        except ClientError as e:
            logger.error(f"Error fetching cron jobs: {e}")
            raise ScheduleError(f"Failed to list cron jobs: {e}") from e
        return jobs


def _describe_rule(rule: dict, targets: list[dict]) -> ScheduledJob:
    job = ScheduledJob(
        name=rule["Name"],
        schedule=rule.get("ScheduleExpression", ""),
        active=rule.get("State") == "ENABLED",
    )
    if not targets:
        return job

    target = targets[0]
    # arn:aws:lambda:<region>:<account>:function:<name>
    job.target_function = target.get("Arn", "").split(":function:")[-1] or "Unknown"

    raw = target.get("Input") or ""
    job.raw_command = raw[:RAW_COMMAND_PREVIEW_LENGTH] + (
        "..." if len(raw) > RAW_COMMAND_PREVIEW_LENGTH else ""
    )
    try:
        payload = json.loads(raw) if raw else {}
    except json.JSONDecodeError:
        payload = {}
    if isinstance(payload, dict) and isinstance(payload.get("sources"), list):
        job.target_sources = [str(s) for s in payload["sources"]]
    return job


class ScheduleController:
    """
    Active/Paused control of the recurring ingestion trigger.

    ``set_schedule`` always lands in Active; ``set_active`` toggles between
    the two states. Overlapping runs are not prevented here.
    """

    def __init__(
        self,
        settings: ScraperSettingsManager,
        registrar: EventBridgeTriggerRegistrar,
        default_cron: str = DEFAULT_CRON_EXPRESSION,
    ):
        self.settings = settings
        self.registrar = registrar
        self.default_cron = default_cron

    def get_state(self) -> ScheduleState:
        return self.settings.get_state()

    def set_schedule(self, cron_expression: str) -> ScheduleState:
        """
        Replace the recurring trigger and activate it.

        Args:
            cron_expression: 5-field cron expression

        Returns:
            The persisted state

        Raises:
            InvalidCronExpressionError: If the expression is malformed; nothing is changed
            ScheduleError: If registration or persistence fails
        """
        expression = " ".join(validate_cron(cron_expression))
        to_eventbridge_schedule(expression)

        logger.info(f"Updating cron schedule to: {expression}")
        try:
            self.registrar.unregister()
        except ScheduleError as e:
            logger.warning(f"Could not unschedule existing job (may not exist): {e}")

        self.registrar.register(expression)
        self._save(cron_expression=expression, is_active=True)
        return self.settings.get_state()

    def set_active(self, active: bool) -> ScheduleState:
        """
        Pause or resume the recurring trigger.

        Resuming re-registers the last persisted expression (or the default
        if none was ever stored). Pausing removes the trigger best-effort.

        Returns:
            The persisted state

        Raises:
            ScheduleError: If registration or persistence fails
        """
        logger.info(f"Toggling cron job active state to: {active}")

        if active:
            state = self.settings.get_state()
            expression = state.cron_expression or self.default_cron
            self.registrar.register(expression)
            self._save(cron_expression=expression, is_active=True)
        else:
            try:
                self.registrar.unregister()
            except ScheduleError as e:
                logger.warning(f"Could not unschedule job: {e}")
            self._save(is_active=False)

        return self.settings.get_state()

    def _save(self, **fields) -> None:
        try:
            self.settings.save_state(**fields)
        except ClientError as e:
            raise ScheduleError(f"Failed to update settings: {e}") from e
