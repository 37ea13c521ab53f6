"""Ingestion coordinator — fetch every source in order, isolating failures per source."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from trendfinder.ingestion.adapter import FetchServices, SourceAdapter
from trendfinder.ingestion.errors import RateLimitError, SourceFetchError
from trendfinder.ingestion.normalize import Story
from trendfinder.ingestion.registry import get_adapter_class
from trendfinder.ingestion.source import SourceDescriptor, SourceKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceOutcome:
    """Result of fetching one source: its stories, or the error that stopped it."""

    source: SourceDescriptor
    stories: tuple[Story, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def isolate(
    source: SourceDescriptor,
    operation: Callable[[], Awaitable[list[Story]]],
) -> SourceOutcome:
    """Run *operation* for *source*, turning any failure into a failed outcome."""
    try:
        stories = await operation()
    except RateLimitError:
        logger.error("Rate limit exceeded for %s. Skipping this source.", source.identifier)
        return SourceOutcome(source=source, error="rate_limited")
    except Exception as exc:
        logger.exception("Error fetching source %s", source.identifier)
        return SourceOutcome(source=source, error=f"{type(exc).__name__}: {exc}")
    return SourceOutcome(source=source, stories=tuple(stories))


class _AdapterCache:
    """Instantiates each adapter class at most once per run."""

    def __init__(self, services: FetchServices) -> None:
        self._services = services
        self._adapters: dict[SourceKind, SourceAdapter] = {}

    def get(self, kind: SourceKind) -> SourceAdapter:
        adapter = self._adapters.get(kind)
        if adapter is None:
            adapter_cls = get_adapter_class(kind)
            if adapter_cls is None:
                raise SourceFetchError(f"No adapter registered for source kind '{kind}'")
            adapter = adapter_cls(self._services)
            self._adapters[kind] = adapter
        return adapter


async def collect_outcomes(
    sources: list[SourceDescriptor],
    services: FetchServices,
) -> list[SourceOutcome]:
    """Fetch each source sequentially and return one outcome per source, in order."""
    adapters = _AdapterCache(services)
    outcomes: list[SourceOutcome] = []

    for source in sources:
        logger.info("Fetching %s", source)

        async def operation(source: SourceDescriptor = source) -> list[Story]:
            return await adapters.get(source.kind).fetch(source.identifier)

        outcome = await isolate(source, operation)
        if outcome.ok:
            logger.info("Source %s contributed %d story(ies)", source, len(outcome.stories))
        outcomes.append(outcome)

    return outcomes


async def ingest(
    sources: list[SourceDescriptor],
    services: FetchServices,
) -> list[Story]:
    """Fetch all sources and concatenate their stories in source order.

    Never raises; failing sources contribute nothing.
    """
    outcomes = await collect_outcomes(sources, services)
    stories = [story for outcome in outcomes for story in outcome.stories]
    failed = sum(1 for outcome in outcomes if not outcome.ok)
    logger.info(
        "Combined stories: %d total from %d source(s) (%d failed)",
        len(stories), len(outcomes), failed,
    )
    return stories
