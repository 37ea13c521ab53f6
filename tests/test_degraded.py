"""Tests for trendfinder.ingestion.degraded — placeholder result detection."""

from __future__ import annotations

from trendfinder.ingestion.degraded import (
    UpstreamHealth,
    detect_upstream_health,
    first_present,
    item_text,
)


class TestDetectUpstreamHealth:
    def test_empty_batch_is_normal(self):
        assert detect_upstream_health([]) is UpstreamHealth.NORMAL

    def test_placeholder_first_item_is_degraded(self):
        items = [{"noResults": True}, {"id": "1", "text": "real"}]
        assert detect_upstream_health(items) is UpstreamHealth.DEGRADED

    def test_empty_strings_count_as_missing(self):
        assert detect_upstream_health([{"id": "", "url": "", "text": ""}]) is UpstreamHealth.DEGRADED

    def test_id_present_is_normal(self):
        assert detect_upstream_health([{"id": "1"}]) is UpstreamHealth.NORMAL

    def test_url_present_is_normal(self):
        assert detect_upstream_health([{"url": "https://x.com/a/status/1"}]) is UpstreamHealth.NORMAL

    def test_text_present_is_normal(self):
        assert detect_upstream_health([{"text": "hello"}]) is UpstreamHealth.NORMAL

    def test_only_first_item_inspected(self):
        items = [{"id": "1", "text": "ok"}, {}]
        assert detect_upstream_health(items) is UpstreamHealth.NORMAL

    def test_camel_case_fields_recognized(self):
        assert detect_upstream_health([{"fullText": "hello"}]) is UpstreamHealth.NORMAL


class TestFieldHelpers:
    def test_item_text_prefers_full_text(self):
        assert item_text({"full_text": "long", "text": "short"}) == "long"

    def test_item_text_falls_back_to_text(self):
        assert item_text({"full_text": "", "text": "short"}) == "short"

    def test_item_text_blank_is_none(self):
        assert item_text({"text": "   "}) is None

    def test_first_present_skips_empty(self):
        assert first_present({"id": "", "id_str": "42"}, ("id", "id_str")) == "42"
        assert first_present({}, ("id",)) is None
