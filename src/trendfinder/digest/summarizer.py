"""Trend clustering of ingested stories using Claude API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

import anthropic

from trendfinder.ingestion.normalize import Story, serialize_stories

logger = logging.getLogger(__name__)

TRENDS_PROMPT_TEMPLATE = """\
You are given a list of raw crypto and blockchain-related stories sourced from \
websites, newsletters and Twitter/X.
Your task is to find interesting trends, launches, or unique insights from these sources.

For each story or tweet, provide:
1. A 'story_or_tweet_link' (the URL)
2. A 'description' (a one-sentence summary that captures the key point)
3. A 'category' that categorizes the content (e.g., "DeFi", "Stablecoins", \
"Bitcoin", "Regulation", etc.)

Return at least 10 stories/tweets unless fewer are available.
Group similar stories or tweets together under common themes or trends.

Format the output strictly as JSON:
{{
  "trends": [
    {{
      "trendName": "Name of the trend or theme",
      "items": [
        {{
          "story_or_tweet_link": "https://...",
          "description": "One sentence description of the item",
          "category": "Category name"
        }}
      ]
    }}
  ]
}}

Here are the raw stories and tweets:
{stories}"""


@dataclass(frozen=True)
class TrendItem:
    """One story placed under a trend."""

    link: str
    description: str
    category: str = ""
    content: str | None = None


@dataclass(frozen=True)
class Trend:
    """A named cluster of related stories."""

    name: str
    items: tuple[TrendItem, ...]


@dataclass(frozen=True)
class TrendsResult:
    """Result of the trend clustering call."""

    trends: list[Trend]
    error: str | None = None


def format_trends_prompt(stories: list[Story]) -> str:
    """Format the prompt with the serialized stories."""
    return TRENDS_PROMPT_TEMPLATE.format(stories=serialize_stories(stories))


def validate_trends(data: dict) -> list[str]:
    """Validate a parsed trends response.

    Returns a list of validation errors. Empty list means valid.
    """
    errors: list[str] = []
    trends = data.get("trends") if isinstance(data, dict) else None
    if not isinstance(trends, list):
        return ["trends must be a list"]

    for i, trend in enumerate(trends):
        if not isinstance(trend, dict):
            errors.append(f"trends[{i}] must be an object")
            continue
        name = trend.get("trendName")
        if not isinstance(name, str) or not name.strip():
            errors.append(f"trends[{i}].trendName must be a non-empty string")
        items = trend.get("items")
        if not isinstance(items, list):
            errors.append(f"trends[{i}].items must be a list")
            continue
        for j, item in enumerate(items):
            if not isinstance(item, dict):
                errors.append(f"trends[{i}].items[{j}] must be an object")
                continue
            link = item.get("story_or_tweet_link") or item.get("link")
            if not isinstance(link, str) or not link:
                errors.append(f"trends[{i}].items[{j}] has no link")
            description = item.get("description") or item.get("headline")
            if not isinstance(description, str) or not description:
                errors.append(f"trends[{i}].items[{j}] has no description")

    return errors


def _build_trends(data: dict) -> list[Trend]:
    trends: list[Trend] = []
    for trend in data["trends"]:
        items = tuple(
            TrendItem(
                link=item.get("story_or_tweet_link") or item["link"],
                description=item.get("description") or item["headline"],
                category=item.get("category") or "",
                content=item.get("content") if isinstance(item.get("content"), str) else None,
            )
            for item in trend["items"]
        )
        trends.append(Trend(name=trend["trendName"].strip(), items=items))
    return trends


def generate_trends(
    stories: list[Story],
    *,
    api_key: str,
    model: str,
    max_tokens: int = 4000,
    max_retries: int = 3,
    timeout: int = 120,
) -> TrendsResult:
    """Cluster stories into named trends.

    Returns TrendsResult with the trends on success, or with error details on
    failure. Never raises.
    """
    if not stories:
        return TrendsResult(trends=[])

    prompt = format_trends_prompt(stories)
    logger.info("Generating trends from %d stories (%d characters)", len(stories), len(prompt))

    try:
        raw_response = _call_llm(
            api_key=api_key,
            model=model,
            prompt=prompt,
            max_tokens=max_tokens,
            max_retries=max_retries,
            timeout=timeout,
        )
    except Exception as exc:
        logger.exception("Trends LLM call failed")
        return TrendsResult(trends=[], error=f"api_error: {exc}")

    try:
        data = _parse_json(raw_response)
    except ValueError as exc:
        logger.warning("Failed to parse trends response: %s", exc)
        return TrendsResult(trends=[], error=f"parse_error: {exc}")

    errors = validate_trends(data)
    if errors:
        logger.warning("Trends validation failed: %s", "; ".join(errors))
        return TrendsResult(trends=[], error=f"validation_error: {'; '.join(errors)}")

    trends = _build_trends(data)
    logger.info("Generated %d trend(s)", len(trends))
    return TrendsResult(trends=trends)


def _call_llm(
    *,
    api_key: str,
    model: str,
    prompt: str,
    max_tokens: int,
    max_retries: int,
    timeout: int,
) -> str:
    """Call the Anthropic API and return the text response."""
    client = anthropic.Anthropic(
        api_key=api_key,
        max_retries=max_retries,
        timeout=timeout,
    )
    message = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        messages=[{"role": "user", "content": prompt}],
    )
    block = message.content[0] if message.content else None
    if block is None or block.type != "text":
        raise ValueError("Invalid response format from Claude")
    return block.text


def _parse_json(raw: str) -> dict:
    """Extract and parse JSON from the LLM response.

    Handles responses that may include markdown code fences.
    """
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [line for line in lines if not line.strip().startswith("```")]
        text = "\n".join(lines).strip()
    if not text:
        raise ValueError("Empty response")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc
