"""Discover-then-detail extraction shared by the website and newsletter adapters.

1. Discovery: one extract request against the landing page yields candidate URLs.
2. Detail: one extract request per candidate yields at most one Story each.

A discovery failure aborts the source. A detail failure skips only that candidate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from trendfinder.ingestion.errors import (
    DetailFailure,
    DiscoveryFailure,
    InvalidStoryError,
    SourceFetchError,
)
from trendfinder.ingestion.normalize import Story, build_story, is_absolute_url, resolve_url

if TYPE_CHECKING:
    from trendfinder.ingestion.firecrawl import FirecrawlClient

logger = logging.getLogger(__name__)

STORIES_SCHEMA = {
    "type": "object",
    "properties": {
        "stories": {
            "type": "array",
            "description": "A list of today's crypto or blockchain-related stories",
            "items": {
                "type": "object",
                "properties": {
                    "headline": {"type": "string", "description": "Story or post headline"},
                    "link": {"type": "string", "description": "A link to the post or story"},
                    "date_posted": {
                        "type": "string",
                        "description": "The date the story or post was published",
                    },
                    "content": {
                        "type": "string",
                        "description": "Summary or content of the article",
                    },
                },
                "required": ["headline", "link", "date_posted"],
            },
        },
    },
    "required": ["stories"],
}


@dataclass(frozen=True)
class Candidate:
    """A content URL found by the discovery step."""

    url: str
    title: str = ""
    date: str | None = None


@dataclass(frozen=True)
class ExtractionPlan:
    """Parameters of one discover-then-detail protocol."""

    discovery_prompt: Callable[[str], str]
    discovery_schema: dict | None
    parse_candidates: Callable[[Any, str], list[Candidate]]
    detail_prompt: Callable[[Candidate], str]
    detail_schema: dict
    build_story: Callable[[Any, Candidate, str], Story]
    max_candidates: int


def make_candidate(url: Any, title: Any, base_url: str, date: Any = None) -> Candidate | None:
    """Build a Candidate with its URL resolved against *base_url*.

    Returns None when no absolute URL can be derived.
    """
    if not isinstance(url, str):
        return None
    resolved = resolve_url(url, base_url)
    if not is_absolute_url(resolved):
        return None
    return Candidate(
        url=resolved,
        title=title.strip() if isinstance(title, str) else "",
        date=date if isinstance(date, str) and date.strip() else None,
    )


def first_story_entry(data: Any, candidate: Candidate) -> dict:
    """Return the first entry of a ``{"stories": [...]}`` payload.

    Raises DetailFailure when the payload carries no story.
    """
    stories = data.get("stories") if isinstance(data, dict) else None
    if not isinstance(stories, list) or not stories or not isinstance(stories[0], dict):
        raise DetailFailure(f"No story extracted from {candidate.url}")
    return stories[0]


def story_from_entry(
    entry: dict,
    candidate: Candidate,
    fetched_at: str,
    *,
    content: str | None = None,
) -> Story:
    """Map an extracted story entry to a Story pinned to the candidate URL."""
    headline = entry.get("headline")
    if not isinstance(headline, str) or not headline.strip():
        headline = candidate.title
    date_posted = entry.get("date_posted")
    if not isinstance(date_posted, str) or not date_posted.strip():
        date_posted = candidate.date
    if content is None:
        content = entry.get("content") if isinstance(entry.get("content"), str) else None
    return build_story(
        headline=headline,
        link=candidate.url,
        date_posted=date_posted,
        fallback_date=fetched_at,
        content=content,
    )


async def discover(
    firecrawl: FirecrawlClient,
    source_url: str,
    plan: ExtractionPlan,
) -> list[Candidate]:
    """Run the discovery step. Raises DiscoveryFailure if nothing usable comes back."""
    logger.info("Discovery: extracting candidates from %s", source_url)
    result = await firecrawl.extract(
        [source_url],
        prompt=plan.discovery_prompt(source_url),
        schema=plan.discovery_schema,
    )
    if not result.success:
        raise DiscoveryFailure(f"Failed to extract from {source_url}: {result.error}")

    candidates = plan.parse_candidates(result.data, source_url)[: plan.max_candidates]
    if not candidates:
        raise DiscoveryFailure(f"No candidate URLs found on {source_url}")
    logger.info("Found %d candidate(s) on %s", len(candidates), source_url)
    return candidates


async def fetch_detail(
    firecrawl: FirecrawlClient,
    candidate: Candidate,
    plan: ExtractionPlan,
    fetched_at: str,
) -> Story:
    """Run the detail step for one candidate. Raises DetailFailure on failure."""
    logger.info("Detail: extracting content from %s", candidate.url)
    result = await firecrawl.extract(
        [candidate.url],
        prompt=plan.detail_prompt(candidate),
        schema=plan.detail_schema,
    )
    if not result.success:
        raise DetailFailure(f"Failed to extract {candidate.url}: {result.error}")
    try:
        return plan.build_story(result.data, candidate, fetched_at)
    except InvalidStoryError as exc:
        raise DetailFailure(f"Unusable story from {candidate.url}: {exc}") from exc


async def discover_then_detail(
    firecrawl: FirecrawlClient,
    source_url: str,
    plan: ExtractionPlan,
    *,
    fetched_at: str,
) -> list[Story]:
    """Run the full protocol and return the successful stories in discovery order."""
    candidates = await discover(firecrawl, source_url, plan)

    stories: list[Story] = []
    for candidate in candidates:
        try:
            story = await fetch_detail(firecrawl, candidate, plan, fetched_at)
        except SourceFetchError as exc:
            logger.warning("Skipping %s: %s", candidate.url, exc)
            continue
        logger.info("Extracted content from %s", candidate.url)
        stories.append(story)

    return stories[: plan.max_candidates]
