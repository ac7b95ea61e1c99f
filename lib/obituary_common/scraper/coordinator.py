"""
Ingestion coordination: fetch -> extract -> dedup -> insert, per source.

Sources are processed one at a time within a run. A failing source or
record is recorded in the run summary and the run moves on; only a missing
API key (raised when the fetcher is built) stops a run before it starts.
"""

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime

from obituary_common.constants import MANUAL_SOURCE_NAME
from obituary_common.exceptions import StorageError
from obituary_common.logging_utils import run_summary
from obituary_common.scraper.extractor import extract_obituaries
from obituary_common.scraper.fetcher import FetchError
from obituary_common.scraper.models import IngestionResult, ScrapedObituary
from obituary_common.sources import SOURCES, get_source, select_sources

logger = logging.getLogger(__name__)

# Longest fetch error body kept in the run summary
MAX_ERROR_LENGTH = 300


@dataclass(frozen=True)
class ScrapeTarget:
    """
    One page to scrape within a run.

    Attributes:
        label: Name used in errors and per-source counts
        url: Page URL
        source_name: Display name stored on extracted obituaries
        source_id: Registry id, None for ad hoc URLs
    """

    label: str
    url: str
    source_name: str
    source_id: str | None = None


def _require_strings(values: list, field: str) -> None:
    if not all(isinstance(value, str) for value in values):
        raise ValueError(f"{field} must contain only strings")


def resolve_targets(
    sources: list[str] | None = None,
    historical: dict | None = None,
) -> tuple[list[ScrapeTarget], list[str]]:
    """
    Turn a run request into scrape targets.

    Args:
        sources: Source ids; None or empty means every registered source
        historical: {"sources": [...], "months": [...]} for archive pages

    Returns:
        Tuple of (targets, errors for unknown source ids)

    Raises:
        ValueError: If ``historical`` or ``sources`` is malformed
    """
    errors: list[str] = []

    if historical is not None:
        if not isinstance(historical, dict):
            raise ValueError("historical must be an object with sources and months")
        source_ids = historical.get("sources")
        months = historical.get("months")
        if not isinstance(source_ids, list) or not isinstance(months, list):
            raise ValueError("historical.sources and historical.months must be lists")
        _require_strings(source_ids, "historical.sources")
        _require_strings(months, "historical.months")

        targets = []
        for source_id in source_ids:
            source = get_source(source_id)
            if source is None:
                errors.append(f"Unknown source: {source_id}")
                continue
            if not source.supports_archive:
                logger.info(f"No historical URL template for source: {source_id}")
                continue
            for month in months:
                targets.append(
                    ScrapeTarget(
                        label=f"{source.name} ({month})",
                        url=source.archive_url(month),
                        source_name=source.name,
                        source_id=source.id,
                    )
                )
        logger.info(f"Historical scraping: {len(targets)} URLs to process")
        return targets, errors

    if sources:
        if not isinstance(sources, list):
            raise ValueError("sources must be a list of source ids")
        _require_strings(sources, "sources")
        selected, unknown = select_sources(sources)
        errors.extend(f"Unknown source: {source_id}" for source_id in unknown)
    else:
        selected = list(SOURCES)

    targets = [ScrapeTarget(s.name, s.url, s.name, s.id) for s in selected]
    return targets, errors


class IngestionCoordinator:
    """Runs ingestion over a set of sources and summarizes the outcome."""

    def __init__(
        self,
        fetcher,
        store,
        dedup,
        settings=None,
        request_delay_ms: int = 0,
    ):
        """
        Initialize coordinator.

        Args:
            fetcher: Object with ``fetch(url) -> FetchResult`` (FirecrawlFetcher)
            store: Object with ``insert(obituary) -> id | None`` (ObituaryStore)
            dedup: Object with ``is_duplicate(obituary) -> bool`` (DeduplicationService)
            settings: Optional ScraperSettingsManager; last_run_at is updated after each run
            request_delay_ms: Courtesy delay between sources in milliseconds
        """
        self.fetcher = fetcher
        self.store = store
        self.dedup = dedup
        self.settings = settings
        self.request_delay_ms = request_delay_ms

    def run(
        self,
        sources: list[str] | None = None,
        historical: dict | None = None,
    ) -> IngestionResult:
        """
        Ingest registered sources.

        Args:
            sources: Source ids; None or empty means every registered source
            historical: {"sources": [...], "months": [...]} to scrape archive pages instead

        Returns:
            IngestionResult with counts and per-source errors

        Raises:
            ValueError: If ``historical`` or ``sources`` is malformed
        """
        targets, errors = resolve_targets(sources, historical)
        result = IngestionResult(errors=errors)
        return self._process(targets, result)

    def run_url(self, url: str, name: str | None = None) -> IngestionResult:
        """
        Ingest a single ad hoc page.

        Args:
            url: Page URL
            name: Source name stored on the obituaries
        """
        if not url.startswith(("http://", "https://")):
            raise ValueError("sourceUrl must start with http:// or https://")
        name = name or MANUAL_SOURCE_NAME
        return self._process([ScrapeTarget(name, url, name)], IngestionResult())

    def _process(self, targets: list[ScrapeTarget], result: IngestionResult) -> IngestionResult:
        start = time.time()
        run_date = datetime.now(UTC).date()
        inserted_keys: set[tuple[str, str]] = set()

        for index, target in enumerate(targets):
            if index > 0 and self.request_delay_ms > 0:
                time.sleep(self.request_delay_ms / 1000.0)

            logger.info(f"Processing source {index + 1}/{len(targets)}: {target.label}")
            try:
                fetched = self.fetcher.fetch(target.url)
            except FetchError as e:
                logger.error(f"Error processing {target.label}: {e}")
                result.errors.append(f"{target.label}: {e.message[:MAX_ERROR_LENGTH]}")
                continue
            result.scraped += 1

            try:
                if not fetched.markdown:
                    logger.info(f"No markdown content from {target.label}")
                    result.record_source(target.label, 0)
                    continue

                candidates = extract_obituaries(fetched.markdown, target.source_name, today=run_date)
                result.record_source(target.label, len(candidates))

                for obituary in candidates:
                    self._ingest(obituary, target, result, inserted_keys)
            except Exception as e:
                logger.error(f"Error processing {target.label}: {e}", exc_info=True)
                result.errors.append(f"{target.label}: {e}")

        if self.settings is not None:
            self.settings.touch_last_run()

        logger.info(
            run_summary("ingestion_run", result, (time.time() - start) * 1000, targets=len(targets))
        )
        return result

    def _ingest(
        self,
        obituary: ScrapedObituary,
        target: ScrapeTarget,
        result: IngestionResult,
        inserted_keys: set[tuple[str, str]],
    ) -> None:
        key = obituary.dedup_key
        if key in inserted_keys:
            result.skipped += 1
            return

        try:
            if self.dedup.is_duplicate(obituary):
                result.skipped += 1
                return
            item_id = self.store.insert(obituary)
        except StorageError as e:
            logger.error(f"Insert error for {obituary.name}: {e}")
            result.errors.append(f"Failed to insert {obituary.name}: {e}")
            return

        if item_id is None:
            result.skipped += 1
            return

        inserted_keys.add(key)
        result.record_insert(target.label)
