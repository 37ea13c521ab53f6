"""Tests for trendfinder.ingestion.newsletter_adapter — latest-issue extraction."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from trendfinder.ingestion.adapter import FetchServices
from trendfinder.ingestion.errors import FirecrawlError, RateLimitError
from trendfinder.ingestion.firecrawl import ExtractResult
from trendfinder.ingestion.newsletter_adapter import NewsletterAdapter

ARCHIVE = "https://bitcoinops.org/en/newsletters/"
ISSUE = "https://bitcoinops.org/en/newsletters/2026/10/15/"
FIXED_NOW = datetime(2026, 10, 18, 17, 0, tzinfo=timezone.utc)


class _FakeFirecrawl:
    def __init__(self, responses: dict):
        self._responses = responses
        self.calls: list[dict] = []

    async def extract(self, urls, *, prompt, schema=None):
        self.calls.append({"urls": urls, "prompt": prompt, "schema": schema})
        response = self._responses.get(urls[0])
        if isinstance(response, Exception):
            raise response
        return response or ExtractResult(success=False, error="not found")


def _latest(url=ISSUE, title="Bitcoin Optech Newsletter #400", date="2026-10-15"):
    return ExtractResult(
        success=True,
        data={"latestNewsletter": {"url": url, "title": title, "date": date}},
    )


def _issue(**overrides):
    story = {
        "headline": "Bitcoin Optech Newsletter #400: Covenants",
        "link": ISSUE,
        "date_posted": "2026-10-15",
        "summary": "Overall summary of the issue.",
        "content": "Detailed description of the first topic.",
    }
    story.update(overrides)
    return ExtractResult(success=True, data={"stories": [story]})


def _fetch(responses):
    firecrawl = _FakeFirecrawl(responses)
    adapter = NewsletterAdapter(FetchServices(firecrawl=firecrawl, clock=lambda: FIXED_NOW))
    return asyncio.run(adapter.fetch(ARCHIVE)), firecrawl


class TestNewsletterAdapter:
    def test_both_steps_succeed_yields_one_story(self):
        stories, firecrawl = _fetch({ARCHIVE: _latest(), ISSUE: _issue()})
        assert len(stories) == 1
        story = stories[0]
        assert story.headline == "Bitcoin Optech Newsletter #400: Covenants"
        assert story.link == ISSUE
        assert story.date_posted == "2026-10-15"
        assert story.content == "Detailed description of the first topic."
        assert [c["urls"] for c in firecrawl.calls] == [[ARCHIVE], [ISSUE]]

    def test_discovery_failure_yields_nothing(self):
        stories, firecrawl = _fetch({ARCHIVE: ExtractResult(success=False, error="blocked")})
        assert stories == []
        assert len(firecrawl.calls) == 1

    def test_discovery_without_url_yields_nothing(self):
        stories, firecrawl = _fetch({
            ARCHIVE: ExtractResult(success=True, data={"latestNewsletter": {"title": "x"}}),
        })
        assert stories == []
        assert len(firecrawl.calls) == 1

    def test_detail_failure_yields_nothing(self):
        stories, _ = _fetch({ARCHIVE: _latest(), ISSUE: ExtractResult(success=False, error="x")})
        assert stories == []

    def test_detail_exception_yields_nothing(self):
        stories, _ = _fetch({ARCHIVE: _latest(), ISSUE: FirecrawlError("HTTP 500")})
        assert stories == []

    def test_relative_issue_url_resolved(self):
        stories, _ = _fetch({
            ARCHIVE: _latest(url="2026/10/15/"),
            ISSUE: _issue(),
        })
        assert stories[0].link == ISSUE

    def test_link_pinned_to_issue_url(self):
        stories, _ = _fetch({ARCHIVE: _latest(), ISSUE: _issue(link="https://elsewhere.org")})
        assert stories[0].link == ISSUE

    def test_summary_used_when_description_missing(self):
        stories, _ = _fetch({ARCHIVE: _latest(), ISSUE: _issue(content="")})
        assert stories[0].content == "Overall summary of the issue."

    def test_missing_fields_fall_back_to_discovery(self):
        stories, _ = _fetch({ARCHIVE: _latest(), ISSUE: _issue(headline="", date_posted="")})
        assert stories[0].headline == "Bitcoin Optech Newsletter #400"
        assert stories[0].date_posted == "2026-10-15"

    def test_detail_prompt_carries_issue_url(self):
        _, firecrawl = _fetch({ARCHIVE: _latest(), ISSUE: _issue()})
        assert ISSUE in firecrawl.calls[1]["prompt"]
        assert "300-500 words" in firecrawl.calls[1]["prompt"]

    def test_discovery_rate_limit_propagates(self):
        with pytest.raises(RateLimitError):
            _fetch({ARCHIVE: RateLimitError("slow down", status_code=429)})
