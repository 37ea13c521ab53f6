"""Source list loading — built-in defaults or a JSON file."""

from __future__ import annotations

import json
import logging

from trendfinder.config import Config
from trendfinder.ingestion.source import SourceDescriptor, SourceKind

logger = logging.getLogger(__name__)

DEFAULT_WEBSITES = (
    "https://bitcoinmagazine.com/",
    "https://www.ledgerinsights.com/",
    "https://www.theblock.co/",
)
DEFAULT_NEWSLETTERS = ("https://bitcoinops.org/en/newsletters/",)


def default_sources(config: Config) -> list[SourceDescriptor]:
    """Build the default source list from the credentials that are available.

    Firecrawl-backed sources need FIRECRAWL_API_KEY. Social sources need
    APIFY_API_TOKEN plus X_USERNAMES and/or X_SEARCH_TERMS.
    """
    sources: list[SourceDescriptor] = []
    if config.firecrawl_api_key:
        sources.extend(SourceDescriptor(url, SourceKind.WEBSITE) for url in DEFAULT_WEBSITES)
        sources.extend(
            SourceDescriptor(url, SourceKind.NEWSLETTER) for url in DEFAULT_NEWSLETTERS
        )
    if config.apify_api_token:
        sources.extend(
            SourceDescriptor(username, SourceKind.SOCIAL_USER) for username in config.x_usernames
        )
        sources.extend(
            SourceDescriptor(term, SourceKind.SOCIAL_SEARCH) for term in config.x_search_terms
        )
    return sources


def load_sources_file(path: str) -> list[SourceDescriptor]:
    """Load sources from a JSON file.

    Expected format:
    {
        "sources": [
            {"identifier": "https://...", "kind": "website", "enabled": true},
            ...
        ]
    }
    Entries with an unknown kind or no identifier are skipped.
    """
    with open(path) as f:
        data = json.load(f)

    sources: list[SourceDescriptor] = []
    for entry in data.get("sources", []):
        if not entry.get("enabled", True):
            continue
        identifier = (entry.get("identifier") or "").strip()
        if not identifier:
            logger.warning("Source entry without identifier, skipping: %s", entry)
            continue
        try:
            kind = SourceKind(entry.get("kind", ""))
        except ValueError:
            logger.warning("Unknown source kind '%s', skipping", entry.get("kind"))
            continue
        sources.append(SourceDescriptor(identifier, kind))
    return sources


def load_sources(config: Config) -> list[SourceDescriptor]:
    """Return the configured source list. Never raises."""
    try:
        if config.sources_config_path:
            sources = load_sources_file(config.sources_config_path)
        else:
            sources = default_sources(config)
    except Exception:
        logger.exception("Failed to load sources")
        return []
    logger.info("Found %d source(s) to process", len(sources))
    return sources
