"""Detection of placeholder result sets returned by a non-functional credential tier."""

from __future__ import annotations

from enum import Enum
from typing import Any

# Field names differ between scraper versions; snake_case first.
ID_FIELDS = ("id", "id_str")
URL_FIELDS = ("url", "twitterUrl")
PRIMARY_TEXT_FIELDS = ("full_text", "fullText")
FALLBACK_TEXT_FIELDS = ("text",)
TIMESTAMP_FIELDS = ("created_at", "createdAt")


class UpstreamHealth(str, Enum):
    NORMAL = "normal"
    DEGRADED = "degraded"


def first_present(item: dict[str, Any], fields: tuple[str, ...]) -> Any:
    """Return the first non-empty value among *fields*, or None."""
    for field in fields:
        value = item.get(field)
        if value is not None and value != "":
            return value
    return None


def item_text(item: dict[str, Any]) -> str | None:
    """Return the post body: the primary text field, else the fallback one."""
    for fields in (PRIMARY_TEXT_FIELDS, FALLBACK_TEXT_FIELDS):
        value = first_present(item, fields)
        if isinstance(value, str) and value.strip():
            return value
    return None


def detect_upstream_health(items: list[dict[str, Any]]) -> UpstreamHealth:
    """Classify a result set by the shape of its first item.

    The set is DEGRADED when the first item has no identifier, no URL and no
    text at all. An empty set is NORMAL.
    """
    if not items:
        return UpstreamHealth.NORMAL
    first = items[0]
    if (
        first_present(first, ID_FIELDS) is None
        and first_present(first, URL_FIELDS) is None
        and item_text(first) is None
    ):
        return UpstreamHealth.DEGRADED
    return UpstreamHealth.NORMAL
