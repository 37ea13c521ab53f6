"""Tests for trendfinder.ingestion.normalize — Story validation and serialization."""

from __future__ import annotations

import json

import pytest

from trendfinder.ingestion.errors import InvalidStoryError
from trendfinder.ingestion.normalize import (
    Story,
    build_story,
    deserialize_stories,
    is_absolute_url,
    resolve_url,
    serialize_stories,
)

FALLBACK = "2026-10-18T12:00:00+00:00"


def _build(**overrides) -> Story:
    defaults = {
        "headline": "ETF inflows hit record",
        "link": "https://example.com/etf",
        "date_posted": "2026-10-17",
        "fallback_date": FALLBACK,
    }
    defaults.update(overrides)
    return build_story(**defaults)


class TestBuildStory:
    def test_valid_story(self):
        story = _build(content="Summary text")
        assert story.headline == "ETF inflows hit record"
        assert story.link == "https://example.com/etf"
        assert story.date_posted == "2026-10-17"
        assert story.content == "Summary text"

    def test_strips_whitespace(self):
        story = _build(headline="  Padded  ", link=" https://example.com/a ")
        assert story.headline == "Padded"
        assert story.link == "https://example.com/a"

    def test_missing_date_falls_back(self):
        assert _build(date_posted=None).date_posted == FALLBACK
        assert _build(date_posted="   ").date_posted == FALLBACK

    def test_empty_content_stored_as_none(self):
        assert _build(content="").content is None
        assert _build(content=None).content is None

    def test_relative_link_resolved_against_base(self):
        story = _build(link="/news/item-1", base_url="https://example.com/blog/")
        assert story.link == "https://example.com/news/item-1"

    def test_relative_link_without_base_rejected(self):
        with pytest.raises(InvalidStoryError, match="not an absolute URL"):
            _build(link="/news/item-1")

    def test_empty_headline_rejected(self):
        with pytest.raises(InvalidStoryError, match="headline"):
            _build(headline="   ")

    def test_empty_link_rejected(self):
        with pytest.raises(InvalidStoryError, match="link is required"):
            _build(link=None)

    def test_non_http_scheme_rejected(self):
        with pytest.raises(InvalidStoryError):
            _build(link="ftp://example.com/file")

    def test_story_is_frozen(self):
        story = _build()
        with pytest.raises(AttributeError):
            story.headline = "changed"


class TestUrlHelpers:
    def test_is_absolute_url(self):
        assert is_absolute_url("https://example.com/x")
        assert is_absolute_url("http://example.com")
        assert not is_absolute_url("/x")
        assert not is_absolute_url("example.com/x")
        assert not is_absolute_url("")

    def test_resolve_url_keeps_absolute(self):
        assert resolve_url("https://other.org/a", "https://example.com") == "https://other.org/a"

    def test_resolve_url_relative(self):
        assert resolve_url("a/b", "https://example.com/news/") == "https://example.com/news/a/b"


class TestSerialization:
    def test_content_omitted_when_absent(self):
        text = serialize_stories([_build()])
        data = json.loads(text)
        assert data == [{
            "headline": "ETF inflows hit record",
            "link": "https://example.com/etf",
            "date_posted": "2026-10-17",
        }]

    def test_round_trip_preserves_every_field(self):
        stories = [_build(content="Body"), _build(headline="Second")]
        assert deserialize_stories(serialize_stories(stories)) == stories

    def test_non_ascii_kept_readable(self):
        text = serialize_stories([_build(headline="Bitcoin ₿ rally")])
        assert "₿" in text
