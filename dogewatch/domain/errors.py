"""
Feed errors.

Raised at the feed boundary and caught by the refresh jobs, which turn them
into a user-visible message while keeping the last good data.
"""

from __future__ import annotations

from typing import Optional


class FeedError(Exception):
    """Base class for failures fetching or parsing an external feed."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class NetworkError(FeedError):
    """Transport failure or non-success HTTP status."""


class SchemaError(FeedError):
    """Response is missing expected fields or they are malformed."""


class DegradedModeError(FeedError):
    """Primary news source failed and the fallback failed too."""

    def __init__(self, primary_error: FeedError, fallback_error: FeedError):
        super().__init__(
            f"primary failed ({primary_error}); fallback failed ({fallback_error})",
            source="news",
        )
        self.primary_error = primary_error
        self.fallback_error = fallback_error
