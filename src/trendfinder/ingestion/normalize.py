"""Normalization — validate adapter output and produce Story records."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

from trendfinder.ingestion.errors import InvalidStoryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Story:
    """Uniform post-ingestion record handed to the summarizer."""

    headline: str
    link: str
    date_posted: str
    content: str | None = None

    def to_dict(self) -> dict:
        data = {
            "headline": self.headline,
            "link": self.link,
            "date_posted": self.date_posted,
        }
        if self.content is not None:
            data["content"] = self.content
        return data


def is_absolute_url(url: str) -> bool:
    """Return True if *url* is an absolute http(s) URL with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def resolve_url(url: str, base_url: str | None = None) -> str:
    """Resolve a possibly relative *url* against *base_url*.

    Absolute URLs are returned unchanged (whitespace stripped).
    """
    url = (url or "").strip()
    if not url or is_absolute_url(url) or not base_url:
        return url
    return urljoin(base_url, url)


def _validate(headline: str, link: str, date_posted: str) -> list[str]:
    """Validate Story fields. Returns a list of errors."""
    errors: list[str] = []
    if not headline or not headline.strip():
        errors.append("headline is required and must be non-empty")
    if not link or not link.strip():
        errors.append("link is required and must be non-empty")
    elif not is_absolute_url(link):
        errors.append(f"link '{link}' is not an absolute URL")
    if not date_posted or not date_posted.strip():
        errors.append("date_posted is required and must be non-empty")
    return errors


def build_story(
    *,
    headline: str | None,
    link: str | None,
    date_posted: str | None,
    fallback_date: str,
    content: str | None = None,
    base_url: str | None = None,
) -> Story:
    """Build a validated Story.

    Relative links are resolved against *base_url*, a missing date falls back to
    *fallback_date*, and empty content is stored as None.

    Raises InvalidStoryError if the resulting record is invalid.
    """
    headline = (headline or "").strip()
    link = resolve_url(link or "", base_url)
    date_posted = (date_posted or "").strip() or fallback_date
    content = content.strip() if isinstance(content, str) and content.strip() else None

    errors = _validate(headline, link, date_posted)
    if errors:
        raise InvalidStoryError(f"Invalid story: {'; '.join(errors)}")

    return Story(headline=headline, link=link, date_posted=date_posted, content=content)


def serialize_stories(stories: list[Story]) -> str:
    """Serialize stories to a JSON array for the summarizer."""
    return json.dumps([story.to_dict() for story in stories], ensure_ascii=False)


def deserialize_stories(text: str) -> list[Story]:
    """Inverse of serialize_stories."""
    return [
        Story(
            headline=entry["headline"],
            link=entry["link"],
            date_posted=entry["date_posted"],
            content=entry.get("content"),
        )
        for entry in json.loads(text)
    ]
