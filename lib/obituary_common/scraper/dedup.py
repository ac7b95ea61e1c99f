"""
Duplicate detection for scraped obituaries.

A record is a duplicate when another record has the same name and death
date. The check is a point query on the ``NameDeathDateIndex`` global
secondary index; inserts additionally use a deterministic item id derived
from the same pair, so a conditional put rejects duplicates that slip past
the query (overlapping runs, eventually consistent index reads).
"""

import logging
import uuid

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from obituary_common.exceptions import StorageError
from obituary_common.scraper.models import ScrapedObituary

logger = logging.getLogger(__name__)

NAME_DEATH_DATE_INDEX = "NameDeathDateIndex"

_OBITUARY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "obituary-pipeline/obituaries")


def compute_obituary_id(name: str, death_date: str) -> str:
    """
    Deterministic item id for a (name, death_date) pair.

    Args:
        name: Person's name, exactly as stored
        death_date: ISO death date

    Returns:
        UUID string
    """
    return str(uuid.uuid5(_OBITUARY_NAMESPACE, f"{name}|{death_date}"))


class DeduplicationService:
    """Existence checks against the obituaries table."""

    def __init__(self, table_name: str, region_name: str | None = None):
        """
        Initialize deduplication service.

        Args:
            table_name: Name of the obituaries DynamoDB table
            region_name: Optional AWS region name
        """
        self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        self.table_name = table_name

    def exists(self, name: str, death_date: str) -> bool:
        """
        Check whether a record with this name and death date is stored.

        Args:
            name: Person's name
            death_date: ISO death date

        Returns:
            True if a matching record exists

        Raises:
            StorageError: If the query fails
        """
        try:
            response = self.table.query(
                IndexName=NAME_DEATH_DATE_INDEX,
                KeyConditionExpression=Key("name").eq(name) & Key("death_date").eq(death_date),
                Limit=1,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ResourceNotFoundException":
                # Index doesn't exist yet; the conditional insert still guards
                logger.warning(f"{NAME_DEATH_DATE_INDEX} not found, skipping dedup lookup")
                return False
            logger.error(f"DynamoDB error in exists: {error_code}")
            raise StorageError(f"Duplicate check failed for {name}: {error_code or e}") from e

        return bool(response.get("Items"))

    def is_duplicate(self, obituary: ScrapedObituary) -> bool:
        """Check a candidate against storage."""
        return self.exists(obituary.name, obituary.death_date)
