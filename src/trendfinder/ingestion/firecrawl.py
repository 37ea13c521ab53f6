"""Firecrawl extract API client — LLM-backed structured extraction from web pages.

Implements the two calls the extract endpoint needs:
1. POST /v1/extract            start an extraction job
2. GET  /v1/extract/{job_id}   poll the job until it reaches a terminal status
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from trendfinder.ingestion.errors import FirecrawlError, RateLimitError

logger = logging.getLogger(__name__)

FIRECRAWL_API_BASE = "https://api.firecrawl.dev"

_TERMINAL_FAILURES = ("failed", "cancelled")


@dataclass(frozen=True)
class ExtractResult:
    """Outcome of an extraction job."""

    success: bool
    data: Any = None
    error: str | None = None


class FirecrawlClient:
    """Async client for the Firecrawl extract endpoint."""

    def __init__(
        self,
        api_key: str,
        http: httpx.AsyncClient,
        *,
        base_url: str = FIRECRAWL_API_BASE,
        poll_interval: float = 2.0,
        extract_timeout: float = 180.0,
    ) -> None:
        if not api_key:
            raise ValueError("Firecrawl API key is required")
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._poll_interval = poll_interval
        self._extract_timeout = extract_timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    async def extract(
        self,
        urls: list[str],
        *,
        prompt: str,
        schema: dict | None = None,
    ) -> ExtractResult:
        """Run an extraction job over *urls* and wait for its result.

        Returns ExtractResult(success=False, ...) when Firecrawl reports the job
        as unsuccessful. Raises RateLimitError on HTTP 429 and FirecrawlError on
        transport or protocol errors.
        """
        payload: dict[str, Any] = {"urls": urls, "prompt": prompt}
        if schema is not None:
            payload["schema"] = schema

        logger.debug("Firecrawl extract start: urls=%s", urls)
        body = await self._request("POST", "/v1/extract", json=payload)

        if not body.get("success", False):
            return ExtractResult(success=False, error=body.get("error", "unknown error"))

        # Some deployments answer synchronously
        if body.get("status") == "completed" or ("data" in body and "id" not in body):
            return ExtractResult(success=True, data=body.get("data"))

        job_id = body.get("id")
        if not job_id:
            raise FirecrawlError("Firecrawl extract response carried neither data nor job id")

        return await self._wait_for_job(job_id)

    async def _wait_for_job(self, job_id: str) -> ExtractResult:
        started = time.monotonic()
        while True:
            body = await self._request("GET", f"/v1/extract/{job_id}")
            status = body.get("status", "")

            if status == "completed":
                logger.debug("Firecrawl extract %s completed", job_id)
                return ExtractResult(success=True, data=body.get("data"))
            if status in _TERMINAL_FAILURES or body.get("success") is False:
                return ExtractResult(
                    success=False,
                    error=body.get("error") or f"extract job {status or 'failed'}",
                )

            elapsed = time.monotonic() - started
            if elapsed > self._extract_timeout:
                raise FirecrawlError(
                    f"Extract job {job_id} did not finish within {self._extract_timeout:.0f}s"
                )
            logger.debug("Firecrawl extract %s status=%s elapsed=%.1fs", job_id, status, elapsed)
            await asyncio.sleep(self._poll_interval)

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            raise FirecrawlError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitError("Firecrawl rate limit exceeded", status_code=429)
        if response.status_code >= 400:
            raise FirecrawlError(
                f"Firecrawl returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise FirecrawlError(f"Invalid JSON from {url}: {exc}") from exc
        if not isinstance(body, dict):
            raise FirecrawlError(f"Unexpected response shape from {url}")
        return body
