"""Scheduled job functions — ingest, summarize, deliver."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx
from zoneinfo import ZoneInfo

from trendfinder.config import Config
from trendfinder.digest.renderer import ERROR_MESSAGE, format_digest_date, render_digest
from trendfinder.digest.summarizer import Trend, generate_trends
from trendfinder.digest.telegram import deliver_digest, send_alert
from trendfinder.ingestion.adapter import FetchServices
from trendfinder.ingestion.apify import ApifyClient
from trendfinder.ingestion.coordinator import ingest
from trendfinder.ingestion.firecrawl import FirecrawlClient
from trendfinder.ingestion.normalize import Story
from trendfinder.ingestion.source import SourceDescriptor
from trendfinder.sources import load_sources

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Summary of one pipeline run."""

    sources: int = 0
    stories: list[Story] = field(default_factory=list)
    trends: list[Trend] = field(default_factory=list)
    delivered: bool = False
    error: str | None = None


def build_services(config: Config, http: httpx.AsyncClient) -> FetchServices:
    """Create the fetch clients whose credentials are configured."""
    firecrawl = None
    if config.firecrawl_api_key:
        firecrawl = FirecrawlClient(
            config.firecrawl_api_key,
            http,
            base_url=config.firecrawl_base_url,
            poll_interval=config.extract_poll_interval_seconds,
            extract_timeout=config.extract_timeout_seconds,
        )
    apify = None
    if config.apify_api_token:
        apify = ApifyClient(config.apify_api_token, http, base_url=config.apify_base_url)
    return FetchServices(firecrawl=firecrawl, apify=apify)


async def fetch_stories(config: Config, sources: list[SourceDescriptor]) -> list[Story]:
    """Ingest all sources with one shared HTTP connection pool."""
    async with httpx.AsyncClient(
        timeout=config.http_timeout_seconds, follow_redirects=True
    ) as http:
        return await ingest(sources, build_services(config, http))


def run_pipeline(config: Config, *, now: datetime | None = None) -> PipelineResult:
    """Fetch sources, cluster the stories into trends, and deliver the digest.

    Never raises; failures are logged and reported as a Telegram alert.
    """
    result = PipelineResult()
    logger.info("Starting trend finder run")

    try:
        sources = load_sources(config)
        result.sources = len(sources)

        result.stories = asyncio.run(fetch_stories(config, sources))
        logger.info("Scraped %d stories from %d source(s)", len(result.stories), len(sources))

        trends_result = generate_trends(
            result.stories,
            api_key=config.llm_api_key,
            model=config.llm_model,
            max_tokens=config.llm_max_tokens,
            max_retries=config.llm_max_retries,
            timeout=config.llm_timeout_seconds,
        )
        if trends_result.error:
            logger.warning("Trend generation failed: %s", trends_result.error)
            result.error = trends_result.error
            draft = ERROR_MESSAGE
        else:
            result.trends = trends_result.trends
            local_now = (now or datetime.now(timezone.utc)).astimezone(
                ZoneInfo(config.digest_timezone)
            )
            draft = render_digest(result.trends, format_digest_date(local_now))

        delivery = deliver_digest(
            config.telegram_bot_token,
            config.telegram_chat_id,
            draft,
            max_retries=config.telegram_max_retries,
        )
        result.delivered = delivery.delivered
        if not delivery.delivered:
            result.error = f"delivery_error: {delivery.error}"
    except Exception:
        logger.exception("Pipeline failed")
        result.error = "Pipeline failed (see logs)"
        send_alert(
            config.telegram_bot_token,
            config.telegram_chat_id,
            "Trend finder pipeline failed. Check logs for details.",
        )

    return result
