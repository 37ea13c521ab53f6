"""Tests for trendfinder.digest.renderer — digest text and chunking."""

from __future__ import annotations

from datetime import datetime, timezone

from trendfinder.digest.renderer import (
    DEFAULT_TREND_EMOJI,
    EMPTY_MESSAGE,
    TREND_SEPARATOR,
    chunk_message,
    format_digest_date,
    format_for_telegram,
    render_digest,
    trend_emoji,
)
from trendfinder.digest.summarizer import Trend, TrendItem


def _trend(name="Stablecoin Regulation", items=None) -> Trend:
    if items is None:
        items = (
            TrendItem(
                link="https://example.com/genius-act",
                description="Senate advances stablecoin bill.",
                category="Regulation",
            ),
        )
    return Trend(name=name, items=tuple(items))


class TestFormatDigestDate:
    def test_month_day_without_padding(self):
        assert format_digest_date(datetime(2026, 3, 7, tzinfo=timezone.utc)) == "3/7"


class TestTrendEmoji:
    def test_first_keyword_wins(self):
        assert trend_emoji("Bitcoin Regulation") == "₿"

    def test_case_insensitive(self):
        assert trend_emoji("STABLECOIN growth") == "\U0001f48e"

    def test_default(self):
        assert trend_emoji("Macro outlook") == DEFAULT_TREND_EMOJI


class TestRenderDigest:
    def test_single_trend(self):
        text = render_digest([_trend()], "10/18")
        assert text == "\n".join([
            "\U0001f680 Crypto & Blockchain Trends for 10/18",
            "",
            "\U0001f4dc STABLECOIN REGULATION \U0001f4dc",
            "",
            "• [Regulation] Senate advances stablecoin bill.",
            "  https://example.com/genius-act",
        ])

    def test_separator_between_trends_only(self):
        text = render_digest([_trend(), _trend(name="DeFi Lending")], "10/18")
        assert text.count(TREND_SEPARATOR) == 1
        assert not text.endswith(TREND_SEPARATOR)

    def test_no_trends(self):
        text = render_digest([], "10/18")
        assert text.endswith(EMPTY_MESSAGE)

    def test_newsletter_item_shows_excerpt(self):
        content = "Taproot " * 60
        item = TrendItem(
            link="https://bitcoinops.org/en/newsletters/2026/10/15/",
            description="Bitcoin Optech #375",
            category="Bitcoin",
            content=content,
        )
        text = render_digest([_trend(name="Bitcoin Development", items=[item])], "10/18")

        assert "\U0001f4f0 [Bitcoin] Bitcoin Optech #375" in text
        assert f"{content[:300]}..." in text
        assert "Read the full newsletter at: https://bitcoinops.org/en/newsletters/2026/10/15/" in text

    def test_short_content_uses_bullet_layout(self):
        item = TrendItem(link="https://a.example/x", description="d", category="c", content="short")
        text = render_digest([_trend(items=[item])], "10/18")
        assert "• [c] d" in text
        assert "Read the full newsletter" not in text


class TestFormatForTelegram:
    def test_heading_unwrapped(self):
        assert format_for_telegram("## Trends\nbody") == "\n Trends \n\nbody"

    def test_rule_replaced(self):
        result = format_for_telegram("a\n---\nb")
        assert "---" not in result
        assert "⋯" in result


class TestChunkMessage:
    def test_single_chunk_when_short(self):
        assert chunk_message("Short message") == ["Short message"]

    def test_splits_on_paragraph_boundary(self):
        para1 = "A" * 100
        para2 = "B" * 100
        chunks = chunk_message(f"{para1}\n\n{para2}", max_length=150)
        assert chunks == [para1, para2]

    def test_falls_back_to_line_boundary(self):
        line1 = "A" * 100
        line2 = "B" * 100
        chunks = chunk_message(f"{line1}\n{line2}", max_length=150)
        assert chunks == [line1, line2]

    def test_hard_split_when_no_boundary(self):
        chunks = chunk_message("A" * 200, max_length=100)
        assert chunks == ["A" * 100, "A" * 100]

    def test_no_content_lost(self):
        text = f"{'A' * 100}\n\n{'B' * 50}\n\n{'C' * 80}"
        chunks = chunk_message(text, max_length=120)
        assert "".join(c.replace("\n", "") for c in chunks) == text.replace("\n", "")
        assert all(len(c) <= 120 for c in chunks)
