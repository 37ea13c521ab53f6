"""Source adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from trendfinder.ingestion.apify import ApifyClient
    from trendfinder.ingestion.firecrawl import FirecrawlClient
    from trendfinder.ingestion.normalize import Story


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FetchServices:
    """External fetch clients shared by all adapters in one run.

    A client is None when its credentials are not configured; adapters that
    need it fail their source with SourceFetchError.
    """

    firecrawl: FirecrawlClient | None = None
    apify: ApifyClient | None = None
    clock: Callable[[], datetime] = field(default=utc_now)


class SourceAdapter(ABC):
    """Abstract base class for source adapters.

    Every adapter knows how to turn one source identifier into Stories using a
    specific fetch service. The rest of the system is source-agnostic.
    """

    def __init__(self, services: FetchServices) -> None:
        self._services = services

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable adapter name."""

    @abstractmethod
    async def fetch(self, identifier: str) -> list[Story]:
        """Fetch Stories for one source identifier.

        Raises SourceFetchError (or any other exception) when the source as a
        whole cannot be fetched; the coordinator isolates it.
        """
