#!/usr/bin/env python3
"""
Batched "scrape all" caller for the scrape_obituaries endpoint.

A single request for every source runs longer than API Gateway allows, so
this script sends the sources in small batches with a pause in between and
adds up the per-batch summaries.

Usage:
    python scripts/run_ingestion.py --endpoint https://<api>/scrape-obituaries [--token <jwt>]

    # Only some sources
    python scripts/run_ingestion.py --endpoint ... --sources augsburg faz

    # Monthly archives
    python scripts/run_ingestion.py --endpoint ... --months januar-2025 februar-2025

Requirements:
    - obituary_common installed (for the source registry)
    - httpx installed
"""

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field

import httpx

from obituary_common.constants import DEFAULT_BATCH_PAUSE_SECONDS, DEFAULT_BATCH_SIZE
from obituary_common.sources import SOURCES, archive_sources

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Matches the Lambda maximum timeout (seconds)
REQUEST_TIMEOUT = 900.0


@dataclass
class RunTotals:
    """Summed results over all batches."""

    batches: int = 0
    scraped: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def add(self, details: dict) -> None:
        self.batches += 1
        self.scraped += details.get("scraped", 0)
        self.inserted += details.get("inserted", 0)
        self.skipped += details.get("skipped", 0)
        self.errors.extend(details.get("errors", []))


def chunk(items: list[str], size: int) -> list[list[str]]:
    """Split items into consecutive batches of at most ``size``."""
    if size < 1:
        raise ValueError("batch size must be at least 1")
    return [items[i : i + size] for i in range(0, len(items), size)]


def build_payloads(
    source_ids: list[str],
    months: list[str] | None,
    batch_size: int,
) -> list[dict]:
    """Request bodies, one per batch."""
    if months:
        return [
            {"historical": {"sources": batch, "months": months}}
            for batch in chunk(source_ids, batch_size)
        ]
    return [{"sources": batch} for batch in chunk(source_ids, batch_size)]


def run_batches(
    client: httpx.Client,
    endpoint: str,
    payloads: list[dict],
    pause_seconds: float,
    headers: dict[str, str] | None = None,
) -> RunTotals:
    """
    Post each payload and sum the summaries.

    A failed batch is recorded as an error and the next batch still runs.
    """
    totals = RunTotals()
    for index, payload in enumerate(payloads):
        if index > 0 and pause_seconds > 0:
            time.sleep(pause_seconds)

        label = ", ".join(payload.get("sources") or payload["historical"]["sources"])
        logger.info(f"Batch {index + 1}/{len(payloads)}: {label}")

        try:
            response = client.post(endpoint, json=payload, headers=headers or {})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Batch {index + 1} failed: {e}")
            totals.errors.append(f"Batch {index + 1} ({label}): {e}")
            continue
        except ValueError as e:
            logger.error(f"Batch {index + 1} returned invalid JSON: {e}")
            totals.errors.append(f"Batch {index + 1} ({label}): invalid response")
            continue

        details = body.get("details") or {}
        totals.add(details)
        logger.info(body.get("message", f"Batch {index + 1} done"))

    return totals


def main():
    parser = argparse.ArgumentParser(
        description="Scrape all obituary sources in batches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--endpoint", required=True, help="URL of the scrape_obituaries endpoint")
    parser.add_argument("--token", help="Bearer token sent as Authorization header")
    parser.add_argument(
        "--sources",
        nargs="+",
        help="Source ids (default: all sources, or all archive sources with --months)",
    )
    parser.add_argument("--months", nargs="+", help="Archive month tokens, e.g. januar-2025")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Sources per request (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--pause",
        type=float,
        default=DEFAULT_BATCH_PAUSE_SECONDS,
        help=f"Seconds between batches (default: {DEFAULT_BATCH_PAUSE_SECONDS})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.sources:
        source_ids = args.sources
    elif args.months:
        source_ids = [source.id for source in archive_sources()]
    else:
        source_ids = [source.id for source in SOURCES]

    headers = {"Authorization": f"Bearer {args.token}"} if args.token else {}

    try:
        payloads = build_payloads(source_ids, args.months, args.batch_size)
        with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
            totals = run_batches(client, args.endpoint, payloads, args.pause, headers)
    except Exception as e:
        logger.error(f"Ingestion failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("INGESTION SUMMARY")
    print("=" * 60)
    print(f"Batches:          {totals.batches}/{len(payloads)}")
    print(f"Sources scraped:  {totals.scraped}")
    print(f"Inserted:         {totals.inserted}")
    print(f"Already existed:  {totals.skipped}")
    print(f"Errors:           {len(totals.errors)}")
    print("=" * 60)
    for error in totals.errors:
        print(f"  - {error}")

    if totals.errors and totals.batches == 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
