"""
Origin Fetcher

Downloads an image from its origin URL and checks that the payload really
is an image by sniffing its leading bytes. The origin's Content-Type header
is ignored.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from .errors import (
    BadStatusError,
    FetchNetworkError,
    FetchTimeoutError,
    NotAnImageError,
)
from .sniffer import SNIFF_LENGTH, is_image_type, sniff_content_type

logger = logging.getLogger(__name__)

# Deadline for a whole fetch, from call start to last body byte
FETCH_TIMEOUT_SECONDS = 10.0

DEFAULT_HEADERS = {
    "User-Agent": "imgproxycache/1.0",
    "Accept": "image/*,*/*;q=0.8",
}


class OriginFetcher:
    """
    Fetches and validates images from origin servers.

    Usage:
        fetcher = OriginFetcher()
        data = await fetcher.fetch("https://example.com/cat.jpg")
        await fetcher.close()
    """

    def __init__(
        self,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=DEFAULT_HEADERS,
        )

    async def close(self):
        """Close HTTP client (only when this fetcher created it)."""
        if self._owns_client:
            await self.http_client.aclose()

    async def fetch(self, url: str) -> bytes:
        """
        Download an image.

        Raises:
            FetchTimeoutError: the deadline elapsed.
            FetchNetworkError: connection-level failure or unusable URL.
            BadStatusError: final response status >= 300.
            NotAnImageError: sniffed type is not image/*.
        """
        try:
            parsed = urlparse(url)
        except ValueError as e:
            logger.warning(f"[OriginFetcher] Invalid URL: {url[:60]!r} ({e})")
            raise FetchNetworkError(f"invalid URL: {url[:60]!r}", url=url, original=e)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            logger.warning(f"[OriginFetcher] Invalid URL: {url[:60]!r}")
            raise FetchNetworkError(f"unsupported URL: {url[:60]!r}", url=url)

        logger.info(f"[OriginFetcher] Fetching: {url[:80]}")
        try:
            data = await asyncio.wait_for(self._download(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error(f"[OriginFetcher] Timeout: {url[:60]}")
            raise FetchTimeoutError(
                f"no response within {self.timeout}s", url=url
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"[OriginFetcher] Fetch error: {e} ({url[:60]})")
            raise FetchNetworkError(str(e) or type(e).__name__, url=url, original=e)

        content_type = sniff_content_type(data[:SNIFF_LENGTH]).lower()
        if not is_image_type(content_type):
            logger.warning(f"[OriginFetcher] Non-image content {content_type}: {url[:60]}")
            raise NotAnImageError(content_type, url=url)

        logger.info(f"[OriginFetcher] Fetched: {url[:60]} ({len(data)} bytes, {content_type})")
        return data

    async def _download(self, url: str) -> bytes:
        response = await self.http_client.get(url)
        if response.status_code >= 300:
            logger.error(f"[OriginFetcher] HTTP error {response.status_code}: {url[:60]}")
            raise BadStatusError(response.status_code, url=url)
        return response.content
