"""Website source adapter — latest articles from a news site via Firecrawl extract."""

from __future__ import annotations

import logging
from typing import Any

from trendfinder.ingestion.adapter import SourceAdapter
from trendfinder.ingestion.errors import SourceFetchError
from trendfinder.ingestion.extraction import (
    STORIES_SCHEMA,
    Candidate,
    ExtractionPlan,
    discover_then_detail,
    first_story_entry,
    make_candidate,
    story_from_entry,
)
from trendfinder.ingestion.normalize import Story

logger = logging.getLogger(__name__)

MAX_ARTICLES = 3

ARTICLES_SCHEMA = {
    "type": "object",
    "properties": {
        "articles": {
            "type": "array",
            "maxItems": MAX_ARTICLES,
            "description": "A list of the 3 most recent articles",
            "items": {
                "type": "object",
                "properties": {
                    "url": {"type": "string", "description": "URL of the article"},
                    "title": {"type": "string", "description": "Title of the article"},
                },
                "required": ["url", "title"],
            },
        },
    },
    "required": ["articles"],
}

DISCOVERY_PROMPT_TEMPLATE = """\
Extract the URLs and titles of the 3 most recent articles from this page.
Return ONLY a JSON object with the following structure:
{{
  "articles": [
    {{"url": "full URL to the article", "title": "title of the article"}}
  ]
}}
If a URL is relative, convert it to an absolute URL by prepending the base URL: {base_url}
"""

DETAIL_PROMPT_TEMPLATE = """\
Extract the following information from this article:
1. Headline (the title of the article)
2. Publication date
3. A brief summary of the article content (100-200 words)

Return ONLY a JSON object with exactly one story in the following structure:
{{
  "stories": [
    {{
      "headline": "title of the article",
      "link": "{url}",
      "date_posted": "publication date (YYYY-MM-DD format if possible)",
      "content": "brief summary of article content"
    }}
  ]
}}
"""


def _parse_articles(data: Any, base_url: str) -> list[Candidate]:
    articles = data.get("articles") if isinstance(data, dict) else None
    if not isinstance(articles, list):
        return []
    candidates: list[Candidate] = []
    for article in articles:
        if not isinstance(article, dict):
            continue
        candidate = make_candidate(article.get("url"), article.get("title"), base_url)
        if candidate is None:
            logger.debug("Skipping article without a resolvable URL: %s", article)
            continue
        candidates.append(candidate)
    return candidates


def _build_article_story(data: Any, candidate: Candidate, fetched_at: str) -> Story:
    return story_from_entry(first_story_entry(data, candidate), candidate, fetched_at)


WEBSITE_PLAN = ExtractionPlan(
    discovery_prompt=lambda base_url: DISCOVERY_PROMPT_TEMPLATE.format(base_url=base_url),
    discovery_schema=ARTICLES_SCHEMA,
    parse_candidates=_parse_articles,
    detail_prompt=lambda candidate: DETAIL_PROMPT_TEMPLATE.format(url=candidate.url),
    detail_schema=STORIES_SCHEMA,
    build_story=_build_article_story,
    max_candidates=MAX_ARTICLES,
)


class WebsiteAdapter(SourceAdapter):
    """Adapter for news websites: up to three recent articles, each summarized."""

    @property
    def name(self) -> str:
        return "website"

    async def fetch(self, identifier: str) -> list[Story]:
        firecrawl = self._services.firecrawl
        if firecrawl is None:
            raise SourceFetchError("Firecrawl is not configured (FIRECRAWL_API_KEY missing)")

        fetched_at = self._services.clock().isoformat()
        stories = await discover_then_detail(
            firecrawl, identifier, WEBSITE_PLAN, fetched_at=fetched_at
        )
        logger.info("Fetched %d article(s) from %s", len(stories), identifier)
        return stories
