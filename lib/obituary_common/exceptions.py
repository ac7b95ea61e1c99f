"""
Custom exceptions for the obituary scraping and ingestion pipeline.
"""


class ObituaryPipelineError(Exception):
    """Base exception for pipeline errors."""


class ConfigurationError(ObituaryPipelineError):
    """A required setting or credential is missing."""


class StorageError(ObituaryPipelineError):
    """Reading from or writing to the obituary store failed."""


class ScheduleError(ObituaryPipelineError):
    """Registering or removing the recurring trigger failed."""


class InvalidCronExpressionError(ScheduleError):
    """Cron expression is malformed or cannot be scheduled."""

    def __init__(self, expression: str, reason: str = "expected 5 whitespace-separated fields"):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid cron expression {expression!r}: {reason}")
