"""
Data models for the obituary ingestion pipeline.

These models represent obituaries and run summaries as they flow through the pipeline:
fetch -> extract -> dedup -> insert -> summary
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class ScrapedObituary:
    """
    Candidate obituary recovered from one page, not yet persisted.

    Attributes:
        name: Full name ("First Last")
        death_date: ISO date; the run date when not found in the text
        source: Display name of the source
        birth_date: ISO date if found
        location: Place of residence or the source's city
        text: Free text (not populated by the extractor)
        photo_url: Portrait URL (not populated by the extractor)
        death_date_estimated: True when death_date fell back to the run date
        publication_date: Date the candidate was scraped
    """

    name: str
    death_date: str
    source: str
    birth_date: str | None = None
    location: str | None = None
    text: str | None = None
    photo_url: str | None = None
    death_date_estimated: bool = False
    publication_date: str | None = None

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.name, self.death_date)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for DynamoDB storage."""
        return {
            "name": self.name,
            "birth_date": self.birth_date,
            "death_date": self.death_date,
            "death_date_estimated": self.death_date_estimated,
            "publication_date": self.publication_date,
            "location": self.location,
            "text": self.text,
            "source": self.source,
            "photo_url": self.photo_url,
        }


@dataclass
class IngestionResult:
    """
    Summary of one ingestion run.

    Attributes:
        scraped: Sources fetched successfully
        inserted: New obituaries written
        skipped: Candidates already present in storage
        errors: Human-readable per-source and per-candidate failures
        by_source: Per-source label counts of parsed and inserted candidates
    """

    scraped: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    by_source: dict[str, dict[str, int]] = field(default_factory=dict)

    def record_source(self, label: str, parsed: int) -> None:
        self.by_source[label] = {"parsed": parsed, "inserted": 0}

    def record_insert(self, label: str) -> None:
        self.inserted += 1
        if label in self.by_source:
            self.by_source[label]["inserted"] += 1

    def summary_message(self) -> str:
        return (
            f"Scraped {self.scraped} sources, inserted {self.inserted} new obituaries "
            f"({self.skipped} already existed)"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "scraped": self.scraped,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "by_source": {label: dict(counts) for label, counts in self.by_source.items()},
        }


@dataclass
class ScheduleState:
    """
    Persisted configuration of the recurring ingestion trigger.

    Attributes:
        cron_expression: 5-field cron string
        is_active: Whether the trigger is registered
        last_run_at: Timestamp of the last completed run (best-effort)
        updated_at: Last change to the schedule
    """

    cron_expression: str | None = None
    is_active: bool = False
    last_run_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "cron_expression": self.cron_expression,
            "is_active": self.is_active,
            "last_run_at": self.last_run_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ScheduleState":
        if not data:
            return cls()
        return cls(
            cron_expression=data.get("cron_expression"),
            is_active=bool(data.get("is_active", False)),
            last_run_at=data.get("last_run_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class ScheduledJob:
    """A registered recurring trigger as shown to administrators."""

    name: str
    schedule: str
    active: bool
    target_function: str = "Unknown"
    target_sources: list[str] = field(default_factory=list)
    raw_command: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "schedule": self.schedule,
            "active": self.active,
            "target_function": self.target_function,
            "target_sources": list(self.target_sources),
            "raw_command": self.raw_command,
        }


def utc_now_iso() -> str:
    """Current UTC timestamp in ISO format."""
    return datetime.now(UTC).isoformat()
