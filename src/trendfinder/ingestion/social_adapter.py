"""X (Twitter) source adapters — user timelines and keyword searches via an Apify actor."""

from __future__ import annotations

import logging
from abc import abstractmethod
from datetime import datetime, timedelta
from typing import Any

from trendfinder.ingestion.adapter import SourceAdapter
from trendfinder.ingestion.degraded import (
    ID_FIELDS,
    TIMESTAMP_FIELDS,
    URL_FIELDS,
    UpstreamHealth,
    detect_upstream_health,
    first_present,
    item_text,
)
from trendfinder.ingestion.errors import ApifyError, InvalidStoryError, SourceFetchError
from trendfinder.ingestion.normalize import Story, build_story, is_absolute_url

logger = logging.getLogger(__name__)

TWEET_SCRAPER_ACTOR = "apidojo/tweet-scraper"
MAX_POSTS = 50
STATUS_URL_TEMPLATE = "https://x.com/i/status/{}"
UPGRADE_URL = "https://apify.com/pricing"
DEGRADED_NOTICE = (
    "NOTE: Apify's free tier does not support API access - "
    "upgrade to paid plan to get actual tweets"
)


def build_social_stories(
    items: list[dict[str, Any]],
    *,
    label: str,
    window_start: str,
    fetched_at: str,
) -> list[Story]:
    """Map raw scraped posts to Stories.

    Posts without an identifier or text are dropped. If nothing survives and
    the batch looks like placeholder data, a single diagnostic Story is
    returned instead so the problem shows up in the digest.
    """
    items = items[:MAX_POSTS]
    health = detect_upstream_health(items)
    if health is UpstreamHealth.DEGRADED:
        logger.warning(
            "Received placeholder data for %s; the Apify plan likely lacks API access", label
        )

    stories: list[Story] = []
    for item in items:
        post_id = first_present(item, ID_FIELDS)
        text = item_text(item)
        if post_id is None or text is None:
            continue

        url = first_present(item, URL_FIELDS)
        if not isinstance(url, str) or not is_absolute_url(url):
            url = STATUS_URL_TEMPLATE.format(post_id)
        timestamp = first_present(item, TIMESTAMP_FIELDS)

        try:
            stories.append(
                build_story(
                    headline=f"[{label}] {text.strip()}",
                    link=url,
                    date_posted=timestamp if isinstance(timestamp, str) else None,
                    fallback_date=window_start,
                )
            )
        except InvalidStoryError as exc:
            logger.debug("Dropping post %s: %s", post_id, exc)

    logger.info("After filtering, %d of %d post(s) kept for %s", len(stories), len(items), label)

    if not stories and health is UpstreamHealth.DEGRADED:
        return [
            Story(
                headline=f"[{label}] {DEGRADED_NOTICE}",
                link=UPGRADE_URL,
                date_posted=fetched_at,
            )
        ]
    return stories


class _SocialAdapter(SourceAdapter):
    """Shared flow: trigger one scrape run, read its dataset, build stories."""

    window: timedelta

    @abstractmethod
    def _query(self, identifier: str, since: str) -> str:
        """Search query for *identifier* covering posts since *since* (YYYY-MM-DD)."""

    @abstractmethod
    def _label(self, identifier: str) -> str:
        """Headline prefix naming the source."""

    async def fetch(self, identifier: str) -> list[Story]:
        apify = self._services.apify
        if apify is None:
            raise SourceFetchError("Apify is not configured (APIFY_API_TOKEN missing)")

        now: datetime = self._services.clock()
        window_start = now - self.window
        query = self._query(identifier, window_start.date().isoformat())
        logger.info("Calling %s with search term: %s", TWEET_SCRAPER_ACTOR, query)

        run = await apify.call_actor(
            TWEET_SCRAPER_ACTOR,
            {
                "searchTerms": [query],
                "maxItems": MAX_POSTS,
                "tweetLanguage": "en",
                "sort": "Latest",
            },
        )
        if not run.dataset_id:
            raise ApifyError(f"Apify run {run.run_id} has no dataset")

        items = await apify.list_items(run.dataset_id, limit=MAX_POSTS)
        if not items:
            logger.info("No posts found for %s", query)
            return []
        logger.info("Found %d post(s) for %s", len(items), query)

        return build_social_stories(
            items,
            label=self._label(identifier),
            window_start=window_start.isoformat(),
            fetched_at=now.isoformat(),
        )


class SocialUserAdapter(_SocialAdapter):
    """Posts from one X account over the last 24 hours."""

    window = timedelta(hours=24)

    @property
    def name(self) -> str:
        return "social_user"

    def _query(self, identifier: str, since: str) -> str:
        return f"from:{identifier.lstrip('@')} since:{since}"

    def _label(self, identifier: str) -> str:
        return f"{identifier} on X"


class SocialSearchAdapter(_SocialAdapter):
    """Posts matching a search phrase over the last 7 days."""

    window = timedelta(days=7)

    @property
    def name(self) -> str:
        return "social_search"

    def _query(self, identifier: str, since: str) -> str:
        return f"{identifier} since:{since}"

    def _label(self, identifier: str) -> str:
        return f"{identifier} trend on X"
