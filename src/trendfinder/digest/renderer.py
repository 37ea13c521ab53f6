"""Plain-text rendering and message chunking for Telegram digests."""

from __future__ import annotations

import logging
import re
from datetime import datetime

from trendfinder.digest.summarizer import Trend, TrendItem

logger = logging.getLogger(__name__)

TELEGRAM_MAX_LENGTH = 4096

DIGEST_TITLE = "\U0001f680 Crypto & Blockchain Trends for {date}"
TREND_SEPARATOR = "⚡️" * 15
ERROR_MESSAGE = "Error generating draft post."
EMPTY_MESSAGE = "No trending stories found today."

# Checked in order; first keyword contained in the trend name wins.
TREND_EMOJI = (
    ("bitcoin", "₿"),
    ("regulation", "\U0001f4dc"),
    ("tokenization", "\U0001f517"),
    ("stablecoin", "\U0001f48e"),
    ("blockchain", "⛓️"),
    ("defi", "\U0001f3e6"),
    ("nft", "\U0001f3a8"),
    ("gaming", "\U0001f3ae"),
    ("metaverse", "\U0001f310"),
    ("ai", "\U0001f916"),
    ("newsletter", "\U0001f4f0"),
    ("development", "⚙️"),
    ("security", "\U0001f512"),
    ("exchange", "\U0001f4b1"),
)
DEFAULT_TREND_EMOJI = "\U0001f4c8"

_NEWSLETTER_CONTENT_MIN = 100
_NEWSLETTER_EXCERPT_CHARS = 300

_HEADING_RE = re.compile(r"## (.*)")
_MARKDOWN_RULE = "---"
_PLAIN_RULE = "\n" + "⋯" * 24 + "\n"


def format_digest_date(now: datetime) -> str:
    """Short month/day label, e.g. ``10/18``."""
    return f"{now.month}/{now.day}"


def trend_emoji(trend_name: str) -> str:
    """Pick an emoji for a trend by keyword."""
    lowered = trend_name.lower()
    for keyword, emoji in TREND_EMOJI:
        if keyword in lowered:
            return emoji
    return DEFAULT_TREND_EMOJI


def _render_item(item: TrendItem) -> list[str]:
    if item.content and len(item.content) > _NEWSLETTER_CONTENT_MIN:
        category = item.category or "Newsletter"
        return [
            f"\U0001f4f0 [{category}] {item.description}",
            f"  {item.link}",
            "",
            f"{item.content[:_NEWSLETTER_EXCERPT_CHARS]}...",
            "",
            f"Read the full newsletter at: {item.link}",
            "",
        ]
    return [
        f"• [{item.category}] {item.description}",
        f"  {item.link}",
        "",
    ]


def render_digest(trends: list[Trend], digest_date: str) -> str:
    """Render clustered trends as a plain-text digest."""
    lines: list[str] = [DIGEST_TITLE.format(date=digest_date), ""]

    if not trends:
        lines.append(EMPTY_MESSAGE)
        return "\n".join(lines)

    for index, trend in enumerate(trends):
        emoji = trend_emoji(trend.name)
        lines.append(f"{emoji} {trend.name.upper()} {emoji}")
        lines.append("")
        for item in trend.items:
            lines.extend(_render_item(item))
        if index < len(trends) - 1:
            lines.append(TREND_SEPARATOR)
            lines.append("")

    return "\n".join(lines).rstrip()


def format_for_telegram(text: str) -> str:
    """Replace leftover Markdown headings and rules with plain-text equivalents."""
    text = _HEADING_RE.sub(lambda m: f"\n {m.group(1)} \n", text)
    return text.replace(_MARKDOWN_RULE, _PLAIN_RULE)


def chunk_message(text: str, max_length: int = TELEGRAM_MAX_LENGTH) -> list[str]:
    """Split *text* into chunks that each fit within *max_length*.

    Splitting strategy (in order of preference):
    1. Paragraph boundaries (``\\n\\n``)
    2. Line boundaries (``\\n``)
    3. Hard split at *max_length*
    """
    if len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    remaining = text

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        split_pos = _find_split(remaining, "\n\n", max_length)
        if split_pos == -1:
            split_pos = _find_split(remaining, "\n", max_length)
        if split_pos == -1:
            split_pos = max_length

        chunk = remaining[:split_pos].rstrip()
        if chunk:
            chunks.append(chunk)
        remaining = remaining[split_pos:].lstrip("\n")

    return chunks


def _find_split(text: str, delimiter: str, max_length: int) -> int:
    """Find the last occurrence of *delimiter* within *max_length* characters."""
    pos = text.rfind(delimiter, 0, max_length)
    if pos <= 0:
        return -1
    return pos
