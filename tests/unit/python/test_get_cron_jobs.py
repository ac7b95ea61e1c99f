"""Unit tests for get_cron_jobs Lambda handler."""

import importlib.util
import json
import sys
from pathlib import Path
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from obituary_common.exceptions import ScheduleError

RULE_NAME = "scrape-obituaries-schedule"
FUNCTION_ARN = "arn:aws:lambda:us-east-1:123456789012:function:scrape-obituaries"


def _load_get_cron_jobs_module():
    """Load get_cron_jobs module using importlib (avoids 'lambda' keyword issue)."""
    module_path = Path(__file__).parent.parent.parent.parent / "src/lambda/get_cron_jobs/index.py"
    spec = importlib.util.spec_from_file_location("get_cron_jobs_index", module_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules["get_cron_jobs_index"] = module
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def _mock_env(monkeypatch):
    """Set up environment variables for tests (underscore prefix for side-effect fixture)."""
    monkeypatch.setenv("SCHEDULE_RULE_NAME", RULE_NAME)
    monkeypatch.setenv("LOG_LEVEL", "INFO")


class TestGetCronJobsHandler:
    """Tests for get_cron_jobs lambda_handler."""

    @mock_aws
    def test_no_jobs(self, _mock_env):
        module = _load_get_cron_jobs_module()

        response = module.lambda_handler({"httpMethod": "GET"}, None)

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"success": True, "jobs": []}

    @mock_aws
    def test_lists_registered_rule(self, _mock_env):
        events = boto3.client("events", region_name="us-east-1")
        events.put_rule(
            Name=RULE_NAME, ScheduleExpression="cron(33 13 * * ? *)", State="ENABLED"
        )
        events.put_targets(
            Rule=RULE_NAME, Targets=[{"Id": "scrape-obituaries", "Arn": FUNCTION_ARN, "Input": "{}"}]
        )
        events.put_rule(Name="unrelated-rule", ScheduleExpression="rate(1 day)")
        module = _load_get_cron_jobs_module()

        response = module.lambda_handler({"httpMethod": "GET"}, None)

        jobs = json.loads(response["body"])["jobs"]
        assert jobs == [
            {
                "name": RULE_NAME,
                "schedule": "cron(33 13 * * ? *)",
                "active": True,
                "target_function": "scrape-obituaries",
                "target_sources": [],
                "raw_command": "{}",
            }
        ]

    def test_listing_failure(self, _mock_env):
        module = _load_get_cron_jobs_module()

        with patch.object(
            module.EventBridgeTriggerRegistrar,
            "list_jobs",
            side_effect=ScheduleError("Failed to list cron jobs: denied"),
        ):
            response = module.lambda_handler({"httpMethod": "GET"}, None)

        assert response["statusCode"] == 500
        assert json.loads(response["body"])["success"] is False

    def test_options_preflight(self, _mock_env):
        module = _load_get_cron_jobs_module()
        assert module.lambda_handler({"httpMethod": "OPTIONS"}, None)["statusCode"] == 200
