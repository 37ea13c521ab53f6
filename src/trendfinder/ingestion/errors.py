"""Exception types raised by source adapters and fetch clients."""

from __future__ import annotations


class SourceFetchError(Exception):
    """Raised when a fetch service cannot be reached or returns unusable data."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(SourceFetchError):
    """Raised when an upstream service answers with HTTP 429."""


class FirecrawlError(SourceFetchError):
    """Raised when the Firecrawl API returns an error response."""


class ApifyError(SourceFetchError):
    """Raised when the Apify API returns an error or a run does not succeed."""


class DiscoveryFailure(SourceFetchError):
    """Raised when the discovery step yields no usable candidate.

    Aborts the whole source; no detail requests are issued.
    """


class DetailFailure(SourceFetchError):
    """Raised when the detail step fails for a single candidate."""


class InvalidStoryError(ValueError):
    """Raised when a record violates the Story invariants."""
