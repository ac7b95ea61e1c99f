"""Common Library

Shared utilities and classes for the obituary scraping and ingestion pipeline.
"""

from obituary_common import constants
from obituary_common.config import ScraperSettingsManager
from obituary_common.logging_utils import run_summary, safe_log_event

__all__ = [
    "ScraperSettingsManager",
    "constants",
    "run_summary",
    "safe_log_event",
]
