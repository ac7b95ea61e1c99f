"""Scraper Settings Management

This module persists the recurring-ingestion schedule using DynamoDB as the
storage backend. The schedule is a single item under the partition key
'Configuration' with the reserved value 'Scraper':
- cron_expression: 5-field cron string of the recurring trigger
- is_active: whether the trigger is registered
- last_run_at: timestamp of the last completed ingestion run
- updated_at: timestamp of the last schedule change

No caching is used; settings are read from DynamoDB on every call for
immediate consistency.
"""

import boto3
import os
import logging
from typing import Dict, Any, Optional
from botocore.exceptions import BotoCoreError, ClientError

from obituary_common.scraper.models import ScheduleState, utc_now_iso

logger = logging.getLogger(__name__)

SETTINGS_KEY = 'Scraper'


class ScraperSettingsManager:
    """
    Reads and writes the singleton ScheduleState.

    Usage:
        settings = ScraperSettingsManager()
        state = settings.get_state()

    Design Decisions:
        - No caching: reads from DynamoDB on every call for immediate consistency
        - Fails fast: raises exceptions if table access fails, except for the
          best-effort last_run_at update
    """

    def __init__(self, table_name: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            table_name: Settings table name. If not provided, reads from
                       SETTINGS_TABLE environment variable.

        Raises:
            ValueError: If table_name not provided and env var not set
        """
        table_name = table_name or os.environ.get('SETTINGS_TABLE')
        if not table_name:
            raise ValueError(
                "Settings table name not provided. "
                "Set SETTINGS_TABLE environment variable or provide table_name parameter."
            )

        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        self.table_name = table_name

        logger.info(f"Initialized ScraperSettingsManager with table: {table_name}")

    def get_settings_item(self) -> Optional[Dict[str, Any]]:
        """
        Retrieve the raw settings item.

        Returns:
            Settings dictionary if found, None if item doesn't exist

        Raises:
            ClientError: If DynamoDB access fails
        """
        try:
            response = self.table.get_item(Key={'Configuration': SETTINGS_KEY})
        except ClientError:
            logger.exception("Error retrieving scraper settings")
            raise

        item = response.get('Item')
        if not item:
            logger.warning("Scraper settings not found in DynamoDB")
        return item

    def get_state(self) -> ScheduleState:
        """
        Get the persisted schedule state.

        Returns:
            ScheduleState; an inactive state without expression if nothing is stored

        Raises:
            ClientError: If DynamoDB access fails
        """
        return ScheduleState.from_dict(self.get_settings_item())

    def save_state(self, cron_expression: Optional[str] = None, is_active: Optional[bool] = None) -> None:
        """
        Update the schedule fields that are given.

        Args:
            cron_expression: New cron expression, unchanged if None
            is_active: New active flag, unchanged if None

        Raises:
            ClientError: If DynamoDB write fails
        """
        updates: Dict[str, Any] = {'updated_at': utc_now_iso()}
        if cron_expression is not None:
            updates['cron_expression'] = cron_expression
        if is_active is not None:
            updates['is_active'] = is_active

        self._update(updates)
        logger.info(f"Updated scraper settings: {sorted(updates)}")

    def touch_last_run(self) -> bool:
        """
        Record the end of an ingestion run.

        Best-effort: failures are logged, never raised.

        Returns:
            True if the timestamp was written
        """
        try:
            self._update({'last_run_at': utc_now_iso()})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error updating last_run_at: {e}")
            return False

        logger.info("last_run_at updated successfully")
        return True

    def _update(self, updates: Dict[str, Any]) -> None:
        try:
            self.table.update_item(
                Key={'Configuration': SETTINGS_KEY},
                UpdateExpression="SET " + ", ".join(f"#{k} = :{k}" for k in updates),
                ExpressionAttributeNames={f"#{k}": k for k in updates},
                ExpressionAttributeValues={f":{k}": v for k, v in updates.items()},
            )
        except ClientError:
            logger.exception("Error updating scraper settings")
            raise
