"""
Errors surfaced at the request boundary.

Malformed markup and empty extractions are not errors: the engine drops
bad candidates and falls back to synthetic results.
"""

from __future__ import annotations

from typing import Optional


class SearchError(Exception):
    """Base class for failures reported to the caller."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ClientInputError(SearchError):
    """Required query missing or blank; extraction never runs."""

    def __init__(self, message: str = "Query parameter is required"):
        super().__init__(message)


class UpstreamFetchError(SearchError):
    """The provider could not be reached or answered with a non-2xx status."""

    def __init__(
        self,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
        message: str = "Failed to fetch search results",
    ):
        super().__init__(message, details=details)
        self.status_code = status_code
