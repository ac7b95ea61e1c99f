"""
DynamoDB storage for obituary records.

Provides a simple, consistent interface for the records the ingestion
pipeline writes. Visitor-facing fields (condolences, candles, funeral
details) are owned by other services and left untouched here.
"""

import logging
from collections.abc import Iterator
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from obituary_common.exceptions import StorageError
from obituary_common.scraper.dedup import compute_obituary_id
from obituary_common.scraper.models import ScrapedObituary, utc_now_iso

logger = logging.getLogger(__name__)


class ObituaryStore:
    """Read/write access to the obituaries table."""

    def __init__(self, table_name: str, region_name: str | None = None):
        """
        Initialize store.

        Args:
            table_name: Name of the obituaries DynamoDB table
            region_name: Optional AWS region name
        """
        self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        self.table_name = table_name

    def insert(self, obituary: ScrapedObituary) -> str | None:
        """
        Insert a scraped obituary.

        The item id is derived from name and death date and the put is
        conditional, so a second insert of the same pair is rejected.

        Args:
            obituary: Candidate to persist

        Returns:
            The new item id, or None if the record already exists

        Raises:
            StorageError: If DynamoDB rejects the write
        """
        item_id = compute_obituary_id(obituary.name, obituary.death_date)
        item = {"id": item_id, "created_at": utc_now_iso(), **obituary.to_dict()}

        try:
            self.table.put_item(Item=item, ConditionExpression=Attr("id").not_exists())
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ConditionalCheckFailedException":
                logger.info(f"Obituary already stored: {obituary.name} ({obituary.death_date})")
                return None
            logger.error(f"Failed to put item to {self.table_name}: {e}")
            raise StorageError(e.response.get("Error", {}).get("Message") or str(e)) from e

        logger.debug(f"Inserted obituary {item_id}: {obituary.name}")
        return item_id

    def get(self, item_id: str) -> dict[str, Any] | None:
        """Get a record by id, None if not found."""
        try:
            response = self.table.get_item(Key={"id": item_id})
        except ClientError as e:
            logger.error(f"Failed to get item from {self.table_name}: {e}")
            raise StorageError(str(e)) from e
        return response.get("Item")

    def update(self, item_id: str, updates: dict[str, Any]) -> None:
        """
        Update attributes of a record.

        Example:
            store.update("abc", {"location": "Augsburg"})
        """
        if not updates:
            return
        update_expr = "SET " + ", ".join(f"#{k} = :{k}" for k in updates)
        try:
            self.table.update_item(
                Key={"id": item_id},
                UpdateExpression=update_expr,
                ExpressionAttributeNames={f"#{k}": k for k in updates},
                ExpressionAttributeValues={f":{k}": v for k, v in updates.items()},
                ConditionExpression="attribute_exists(id)",
            )
        except ClientError as e:
            logger.error(f"Failed to update item in {self.table_name}: {e}")
            raise StorageError(str(e)) from e

    def delete(self, item_id: str) -> None:
        """Delete a record by id."""
        try:
            self.table.delete_item(Key={"id": item_id})
        except ClientError as e:
            logger.error(f"Failed to delete item from {self.table_name}: {e}")
            raise StorageError(str(e)) from e

    def list_created_since(self, since: str) -> Iterator[dict[str, Any]]:
        """
        Yield records created at or after an ISO timestamp.

        Args:
            since: ISO timestamp (UTC)
        """
        scan_kwargs: dict[str, Any] = {"FilterExpression": Attr("created_at").gte(since)}
        while True:
            try:
                response = self.table.scan(**scan_kwargs)
            except ClientError as e:
                logger.error(f"Failed to scan {self.table_name}: {e}")
                raise StorageError(str(e)) from e

            yield from response.get("Items", [])

            if "LastEvaluatedKey" not in response:
                break
            scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    def summarize_by_source(self, since: str) -> list[dict[str, Any]]:
        """
        Per-source insert counts reconstructed from record timestamps.

        There is no stored run log; this is what administrators see as run
        history.

        Args:
            since: ISO timestamp (UTC) of the window start

        Returns:
            List of {"source", "count", "last_created_at", "estimated_dates"}
            sorted by most recent insert first
        """
        summary: dict[str, dict[str, Any]] = {}
        for item in self.list_created_since(since):
            source = item.get("source") or "Unknown"
            entry = summary.setdefault(
                source,
                {"source": source, "count": 0, "last_created_at": None, "estimated_dates": 0},
            )
            entry["count"] += 1
            if item.get("death_date_estimated"):
                entry["estimated_dates"] += 1
            created_at = item.get("created_at")
            if created_at and (entry["last_created_at"] is None or created_at > entry["last_created_at"]):
                entry["last_created_at"] = created_at

        return sorted(summary.values(), key=lambda e: e["last_created_at"] or "", reverse=True)
