"""
NetworkClient for the contract crawl.

This client is designed to:
- Be the ONLY gateway for outbound requests of a run.
- Route keyed requests through the run's RateLimiter (one in flight per key).
- Treat any status other than 200 as fatal.

Design Principles:
- Transport failures (connect, read, timeout) get a small bounded retry,
  inside the same rate-limit permit so per-key ordering is preserved.
- HTTP status errors are never retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from ingestion.core.errors import ConsistencyError, NetworkStatusError, NetworkTransportError
from ingestion.core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

MAX_RETRIES = 2  # Low retry count to avoid aggression
RETRY_BACKOFF_SECONDS = 2.0
DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
}


class NetworkClient:
    """
    Core HTTP client for one ingestion run.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 30.0,
        retry_backoff_seconds: float = RETRY_BACKOFF_SECONDS,
    ):
        """
        Args:
           rate_limiter: Limiter shared by everything in the run.
           client: Optional pre-built httpx client (tests pass one with a MockTransport).
           timeout_seconds: Per-request timeout for the default client.
           retry_backoff_seconds: Base delay between transport retries.
        """
        self._limiter = rate_limiter
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds, follow_redirects=True, headers=DEFAULT_HEADERS
        )
        self._retry_backoff = retry_backoff_seconds

    async def fetch_text(
        self, url: str, source_key: Optional[str] = None, min_interval_ms: int = 0
    ) -> str:
        """
        GET `url` and return the body text.

        Args:
            url: Target URL.
            source_key: Rate-limit key; None means unthrottled.
            min_interval_ms: Minimum spacing between calls under `source_key`.

        Raises:
            NetworkStatusError: status other than 200.
            NetworkTransportError: request could not complete after retries.
        """
        async with self._limiter.acquire(source_key, min_interval_ms):
            response = await self._send("GET", url)
        return response.text

    async def post_json(self, url: str, payload: Any) -> Any:
        """POST a JSON body (unthrottled) and return the decoded JSON response."""
        response = await self._send("POST", url, json=payload)
        try:
            return response.json()
        except ValueError as e:
            raise ConsistencyError(f"Response from {url} is not valid JSON") from e

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        attempt = 0
        while True:
            try:
                logger.debug(f"{method} {url}")
                response = await self._client.request(method, url, **kwargs)
                break
            except httpx.TransportError as e:
                if attempt >= MAX_RETRIES:
                    raise NetworkTransportError(f"{method} {url} failed: {e}") from e
                attempt += 1
                delay = self._retry_backoff * attempt
                logger.warning(f"Network error for {url}: {e}. Retry {attempt}/{MAX_RETRIES} in {delay:.1f}s")
                await asyncio.sleep(delay)

        if response.status_code != 200:
            raise NetworkStatusError(url, response.status_code)
        return response

    async def close(self):
        """Cleanup resources."""
        await self._client.aclose()
