"""
Error types raised by the refresh pipeline.

Hierarchy:
    DashboardSyncError
    ├── TransportError      network failure or non-2xx HTTP status
    ├── FormatError         payload cannot be unwrapped or parsed as JSON
    └── EmptyDatasetError   parsed table has zero rows

The scheduler catches all of them at its boundary and turns str(err) into
the snapshot's error banner.
"""

from typing import Optional


class DashboardSyncError(Exception):
    """Base exception for a failed fetch-parse-normalize pass."""

    code = "SYNC_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class TransportError(DashboardSyncError):
    """The data source could not be reached or answered with a failure status."""

    code = "TRANSPORT_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message, details={"status_code": status_code, "url": url})


class FormatError(DashboardSyncError):
    """The response body is not a wrapped JSON document."""

    code = "FORMAT_ERROR"


class EmptyDatasetError(DashboardSyncError):
    """The parsed table contains no rows."""

    code = "EMPTY_DATASET"

    def __init__(self, message: str = "No dataset records found"):
        super().__init__(message)
