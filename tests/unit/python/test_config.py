"""Unit tests for ScraperSettingsManager."""

from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from moto import mock_aws

from obituary_common.config import SETTINGS_KEY, ScraperSettingsManager

SETTINGS_TABLE = "test-settings"


def _create_settings_table():
    dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
    return dynamodb.create_table(
        TableName=SETTINGS_TABLE,
        KeySchema=[{"AttributeName": "Configuration", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "Configuration", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )


class TestInit:
    """Tests for table name resolution."""

    def test_missing_table_name(self, monkeypatch):
        monkeypatch.delenv("SETTINGS_TABLE", raising=False)
        with pytest.raises(ValueError, match="Settings table name not provided"):
            ScraperSettingsManager()

    @mock_aws
    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("SETTINGS_TABLE", SETTINGS_TABLE)
        assert ScraperSettingsManager().table_name == SETTINGS_TABLE


class TestState:
    """Tests for reading and writing ScheduleState."""

    @mock_aws
    def test_state_defaults_when_missing(self):
        _create_settings_table()
        state = ScraperSettingsManager(SETTINGS_TABLE).get_state()

        assert state.cron_expression is None
        assert state.is_active is False

    @mock_aws
    def test_save_state(self):
        table = _create_settings_table()
        settings = ScraperSettingsManager(SETTINGS_TABLE)

        settings.save_state(cron_expression="0 6 * * *", is_active=True)

        state = settings.get_state()
        assert state.cron_expression == "0 6 * * *"
        assert state.is_active is True
        assert state.updated_at is not None
        item = table.get_item(Key={"Configuration": SETTINGS_KEY})["Item"]
        assert item["cron_expression"] == "0 6 * * *"

    @mock_aws
    def test_partial_update_keeps_expression(self):
        _create_settings_table()
        settings = ScraperSettingsManager(SETTINGS_TABLE)
        settings.save_state(cron_expression="0 6 * * *", is_active=True)

        settings.save_state(is_active=False)

        state = settings.get_state()
        assert state.cron_expression == "0 6 * * *"
        assert state.is_active is False

    @mock_aws
    def test_touch_last_run(self):
        _create_settings_table()
        settings = ScraperSettingsManager(SETTINGS_TABLE)

        assert settings.touch_last_run() is True
        assert settings.get_state().last_run_at is not None

    def test_touch_last_run_failure_is_logged_not_raised(self):
        settings = ScraperSettingsManager.__new__(ScraperSettingsManager)
        settings.table_name = SETTINGS_TABLE
        settings.table = MagicMock()
        settings.table.update_item.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "missing"}}, "UpdateItem"
        )

        assert settings.touch_last_run() is False

    def test_touch_last_run_connection_failure_not_raised(self):
        """Test that botocore connection errors are logged, not raised."""
        settings = ScraperSettingsManager.__new__(ScraperSettingsManager)
        settings.table_name = SETTINGS_TABLE
        settings.table = MagicMock()
        settings.table.update_item.side_effect = EndpointConnectionError(
            endpoint_url="https://dynamodb.eu-central-1.amazonaws.com"
        )

        assert settings.touch_last_run() is False

    def test_save_state_failure_raises(self):
        settings = ScraperSettingsManager.__new__(ScraperSettingsManager)
        settings.table_name = SETTINGS_TABLE
        settings.table = MagicMock()
        settings.table.update_item.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "missing"}}, "UpdateItem"
        )

        with pytest.raises(ClientError):
            settings.save_state(is_active=True)
