"""Apify API v2 client — start actor runs and read their datasets."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from trendfinder.ingestion.errors import ApifyError, RateLimitError

logger = logging.getLogger(__name__)

APIFY_API_BASE = "https://api.apify.com"

_TERMINAL_STATUSES = frozenset({"SUCCEEDED", "FAILED", "TIMED-OUT", "ABORTED"})
_WAIT_FOR_FINISH_SECONDS = 60
# Apify holds a poll open for up to waitForFinish seconds
_POLL_TIMEOUT = httpx.Timeout(30.0, read=_WAIT_FOR_FINISH_SECONDS + 15.0)


@dataclass(frozen=True)
class RunInfo:
    """Information about an Apify actor run."""

    run_id: str
    dataset_id: str | None
    status: str

    def is_terminal(self) -> bool:
        return self.status in _TERMINAL_STATUSES


class ApifyClient:
    """Async HTTP client for the subset of Apify API v2 the social adapters use."""

    def __init__(
        self,
        token: str,
        http: httpx.AsyncClient,
        *,
        base_url: str = APIFY_API_BASE,
        run_timeout: float = 300.0,
    ) -> None:
        if not token:
            raise ValueError("Apify token is required")
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"}
        self._run_timeout = run_timeout

    async def call_actor(self, actor_id: str, run_input: dict[str, Any]) -> RunInfo:
        """Start an actor run and wait until it finishes.

        Raises ApifyError if the run ends in any status other than SUCCEEDED.
        """
        # Actor ids contain a slash that must stay inside one path segment
        encoded = quote(actor_id, safe="")
        body = await self._request("POST", f"/v2/acts/{encoded}/runs", json=run_input)
        run = _parse_run(body)
        logger.info("Apify run started: actor=%s run_id=%s", actor_id, run.run_id)

        started = time.monotonic()
        while not run.is_terminal():
            if time.monotonic() - started > self._run_timeout:
                raise ApifyError(f"Apify run {run.run_id} did not finish in {self._run_timeout:.0f}s")
            body = await self._request(
                "GET",
                f"/v2/actor-runs/{run.run_id}",
                params={"waitForFinish": _WAIT_FOR_FINISH_SECONDS},
                timeout=_POLL_TIMEOUT,
            )
            run = _parse_run(body)

        if run.status != "SUCCEEDED":
            raise ApifyError(f"Apify run {run.run_id} ended with status {run.status}")
        logger.info("Apify run %s succeeded (dataset=%s)", run.run_id, run.dataset_id)
        return run

    async def list_items(self, dataset_id: str, *, limit: int) -> list[dict[str, Any]]:
        """Fetch up to *limit* items from a dataset."""
        items = await self._request(
            "GET",
            f"/v2/datasets/{dataset_id}/items",
            params={"limit": limit, "clean": "true", "format": "json"},
        )
        if isinstance(items, dict):
            items = items.get("items", [])
        if not isinstance(items, list):
            raise ApifyError(f"Unexpected dataset response for {dataset_id}")
        return [item for item in items if isinstance(item, dict)]

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            raise ApifyError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitError("Apify rate limit exceeded", status_code=429)
        if response.status_code >= 400:
            raise ApifyError(
                f"Apify returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ApifyError(f"Invalid JSON from {url}: {exc}") from exc


def _parse_run(body: Any) -> RunInfo:
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, dict) or not data.get("id"):
        raise ApifyError("Apify run response is missing run data")
    return RunInfo(
        run_id=data["id"],
        dataset_id=data.get("defaultDatasetId"),
        status=data.get("status", "UNKNOWN"),
    )
