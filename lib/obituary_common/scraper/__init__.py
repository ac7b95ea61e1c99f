"""
Obituary scraping module.

This module fetches German obituary portals, extracts candidate obituaries
from the returned Markdown, and ingests new ones into DynamoDB.

Architecture:
- Fetcher: Firecrawl scrape API, one page per call, Markdown output
- Extractor: Ordered pattern rules over Markdown plus field sub-extractors
- Dedup: (name, death_date) lookup on the NameDeathDateIndex GSI
- Coordinator: Sequential per-source fetch -> extract -> dedup -> insert
"""

from obituary_common.scraper.models import (
    IngestionResult,
    ScheduledJob,
    ScheduleState,
    ScrapedObituary,
)

__all__ = [
    "IngestionResult",
    "ScheduleState",
    "ScheduledJob",
    "ScrapedObituary",
]
