"""
Constants used throughout the obituary pipeline.

Centralizes magic numbers and configuration values to improve
maintainability and make tuning easier.
"""

# =============================================================================
# Firecrawl
# =============================================================================

FIRECRAWL_SCRAPE_URL = "https://api.firecrawl.dev/v1/scrape"

# Time the scraping API waits for dynamic content to settle (milliseconds)
FETCH_WAIT_FOR_MS = 3000

# Request timeout for a single scrape call (seconds)
FETCH_TIMEOUT = 90.0

# Locale hint forwarded so German regional pages are returned
FETCH_COUNTRY = "DE"
FETCH_LANGUAGES = ("de",)


# =============================================================================
# Extraction
# =============================================================================

# Context window around a bold name used for date/location recovery
CONTEXT_CHARS_BEFORE = 50
CONTEXT_CHARS_AFTER = 200

# Shortest string accepted as a name
MIN_NAME_LENGTH = 4


# =============================================================================
# Ingestion
# =============================================================================

# Courtesy delay between sources (milliseconds). The scraping API allows
# roughly 9 requests per minute.
DEFAULT_REQUEST_DELAY_MS = 7000

# Caller-side batching for "scrape all" requests
DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_PAUSE_SECONDS = 5.0

# Label used for ad hoc single-URL scrapes
MANUAL_SOURCE_NAME = "Manuell"


# =============================================================================
# Schedule
# =============================================================================

DEFAULT_CRON_EXPRESSION = "33 13 * * *"
DEFAULT_SCHEDULE_RULE_NAME = "scrape-obituaries-schedule"

# Truncation of the trigger input shown in job listings
RAW_COMMAND_PREVIEW_LENGTH = 300


# =============================================================================
# History
# =============================================================================

DEFAULT_HISTORY_DAYS = 30
MAX_HISTORY_DAYS = 365
