"""
Image Resolver

Get-or-populate over the file cache and the origin fetcher:

    cache hit  -> bytes
    cache miss -> fetch -> store -> bytes

Every failure is terminal for the request; nothing is retried. A fetched
image that cannot be stored is reported as a failure, not returned.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from .cache_manager import ShardedFileCache
from .errors import CacheError

logger = logging.getLogger(__name__)


class ImageSource(Protocol):
    """Origin side of the resolver (OriginFetcher or a test double)."""

    async def fetch(self, url: str) -> bytes:
        ...


@dataclass
class ResolvedImage:
    """Image bytes plus where they came from."""
    data: bytes
    cache_hit: bool


class ImageResolver:
    """
    Pull-through cache for remote images.

    Two concurrent misses for the same URL both fetch and both write;
    the last write wins.
    """

    def __init__(
        self,
        cache: ShardedFileCache,
        fetcher: ImageSource,
        use_cache: bool = True,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.use_cache = use_cache

    async def resolve(self, url: str) -> bytes:
        """Return the image bytes for a URL, populating the cache on miss."""
        resolved = await self.resolve_entry(url)
        return resolved.data

    async def resolve_entry(self, url: str) -> ResolvedImage:
        """
        Same as resolve(), also reporting whether the cache served it.

        Raises:
            FetchError: origin fetch or validation failed (nothing stored).
            CacheError: the fetched image could not be stored.
        """
        if not self.use_cache:
            data = await self.fetcher.fetch(url)
            return ResolvedImage(data=data, cache_hit=False)

        try:
            data = self.cache.get(url)
            logger.debug(f"[Resolver] Served from cache: {url[:60]}")
            return ResolvedImage(data=data, cache_hit=True)
        except CacheError as e:
            logger.debug(f"[Resolver] Cache {e.kind.value}, loading from origin: {url[:60]}")

        data = await self.fetcher.fetch(url)
        self.cache.put(url, data)
        return ResolvedImage(data=data, cache_hit=False)
