"""Exceptions raised while collecting metrics from Harbor.

Fetch and decode errors stay inside the group collector that hit them; the
orchestrator only ever sees a boolean per group.
"""

from typing import Optional


class HarborExporterError(Exception):
    """Base exception for all exporter errors."""

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class FetchError(HarborExporterError):
    """Raised on transport failures, non-200 answers and bad total-count headers."""

    def __init__(self, message: str, path: str, status_code: Optional[int] = None):
        super().__init__(message, "FETCH_ERROR")
        self.path = path
        self.status_code = status_code


class DecodeError(HarborExporterError):
    """Raised when an upstream body is not the JSON shape we expect."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, "DECODE_ERROR")
        self.path = path


class GroupFailure(HarborExporterError):
    """A fetch or decode error attributed to one metric group."""

    def __init__(self, group: str, cause: HarborExporterError):
        super().__init__(f"Collecting group '{group}' failed: {cause.message}", "GROUP_FAILURE")
        self.group = group
        self.cause = cause


class DuplicateSampleError(HarborExporterError):
    """Raised when a sample identity is written twice in one scrape."""

    def __init__(self, message: str):
        super().__init__(message, "DUPLICATE_SAMPLE")


class StreamClosedError(HarborExporterError):
    """Raised when a sample is written after the scrape finalized its stream."""

    def __init__(self, message: str):
        super().__init__(message, "STREAM_CLOSED")


class ConfigurationError(HarborExporterError):
    """Raised when the exporter cannot start with the given configuration."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")
