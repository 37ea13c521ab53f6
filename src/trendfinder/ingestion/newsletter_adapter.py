"""Newsletter source adapter — the latest issue of a newsletter archive."""

from __future__ import annotations

import logging
from typing import Any

from trendfinder.ingestion.adapter import SourceAdapter
from trendfinder.ingestion.errors import DiscoveryFailure, SourceFetchError
from trendfinder.ingestion.extraction import (
    Candidate,
    ExtractionPlan,
    discover_then_detail,
    first_story_entry,
    make_candidate,
    story_from_entry,
)
from trendfinder.ingestion.normalize import Story

logger = logging.getLogger(__name__)

LATEST_ISSUE_SCHEMA = {
    "type": "object",
    "properties": {
        "latestNewsletter": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "Full URL to the latest newsletter"},
                "title": {"type": "string", "description": "Title of the latest newsletter"},
                "date": {"type": "string", "description": "Publication date of the newsletter"},
            },
            "required": ["url"],
        },
    },
    "required": ["latestNewsletter"],
}

ISSUE_SCHEMA = {
    "type": "object",
    "properties": {
        "stories": {
            "type": "array",
            "maxItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "headline": {"type": "string", "description": "Title of the newsletter issue"},
                    "link": {"type": "string", "description": "URL of the newsletter issue"},
                    "date_posted": {"type": "string", "description": "Publication date"},
                    "summary": {
                        "type": "string",
                        "description": "Summary of the entire newsletter (250-350 words)",
                    },
                    "content": {
                        "type": "string",
                        "description": (
                            "Detailed description of the first major topic (300-500 words)"
                        ),
                    },
                },
                "required": ["headline", "link", "date_posted"],
            },
        },
    },
    "required": ["stories"],
}

DISCOVERY_PROMPT_TEMPLATE = """\
Extract the URL, title, and date of the most recent newsletter from this page.
Return ONLY a JSON object with the following structure:
{{
  "latestNewsletter": {{
    "url": "full URL to the latest newsletter",
    "title": "title of the latest newsletter",
    "date": "publication date of the newsletter"
  }}
}}
If a URL is relative, convert it to an absolute URL by prepending the base URL: {base_url}
"""

DETAIL_PROMPT_TEMPLATE = """\
Extract the following information from this newsletter:
1. The title of the newsletter
2. The date of publication
3. A summary of the entire newsletter (250-350 words)
4. A detailed description of the first major topic/article in the newsletter (300-500 words)

Return ONLY a JSON object with the following structure:
{{
  "stories": [
    {{
      "headline": "{title}",
      "link": "{url}",
      "date_posted": "publication date (YYYY-MM-DD format if possible)",
      "summary": "summary of the entire newsletter",
      "content": "detailed description of the first major topic/article"
    }}
  ]
}}
"""


def _parse_latest_issue(data: Any, base_url: str) -> list[Candidate]:
    latest = data.get("latestNewsletter") if isinstance(data, dict) else None
    if not isinstance(latest, dict):
        return []
    candidate = make_candidate(
        latest.get("url"), latest.get("title"), base_url, date=latest.get("date")
    )
    return [candidate] if candidate is not None else []


def _detail_prompt(candidate: Candidate) -> str:
    title = candidate.title or "newsletter name and issue title"
    return DETAIL_PROMPT_TEMPLATE.format(title=title, url=candidate.url)


def _build_issue_story(data: Any, candidate: Candidate, fetched_at: str) -> Story:
    entry = first_story_entry(data, candidate)
    content = entry.get("content")
    if not isinstance(content, str) or not content.strip():
        content = entry.get("summary") if isinstance(entry.get("summary"), str) else None
    return story_from_entry(entry, candidate, fetched_at, content=content)


NEWSLETTER_PLAN = ExtractionPlan(
    discovery_prompt=lambda base_url: DISCOVERY_PROMPT_TEMPLATE.format(base_url=base_url),
    discovery_schema=LATEST_ISSUE_SCHEMA,
    parse_candidates=_parse_latest_issue,
    detail_prompt=_detail_prompt,
    detail_schema=ISSUE_SCHEMA,
    build_story=_build_issue_story,
    max_candidates=1,
)


class NewsletterAdapter(SourceAdapter):
    """Adapter for newsletter archives: the most recent issue as one Story."""

    @property
    def name(self) -> str:
        return "newsletter"

    async def fetch(self, identifier: str) -> list[Story]:
        firecrawl = self._services.firecrawl
        if firecrawl is None:
            raise SourceFetchError("Firecrawl is not configured (FIRECRAWL_API_KEY missing)")

        fetched_at = self._services.clock().isoformat()
        try:
            stories = await discover_then_detail(
                firecrawl, identifier, NEWSLETTER_PLAN, fetched_at=fetched_at
            )
        except DiscoveryFailure as exc:
            logger.error("Failed to find the latest newsletter on %s: %s", identifier, exc)
            return []

        if stories:
            logger.info("Fetched latest newsletter %s", stories[0].link)
        return stories
