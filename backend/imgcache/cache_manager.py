"""
Sharded File Cache

File-based cache for proxied images:
- MD5 of the raw URL string is the only index
- Two directory levels derived from the key bound per-directory fan-out
- Entries are the raw image bytes, with no metadata alongside

Cache structure:
cache_dir/
├── c/
│   └── 29/
│       └── b7f54b2df7773722d382f4809d65
└── ...

The key c29ab7f54b2df7773722d382f4809d65 maps to c/29/b7f54b2d...; the
fourth character of the key is not part of the path.
"""

import os
import hashlib
import logging
from pathlib import Path
from typing import Union

from .errors import CacheIOError, CacheMissError, KeyTooShortError

logger = logging.getLogger(__name__)

# Keys of this length or shorter cannot be split into shards
MIN_KEY_LENGTH = 5


def key_for(url: str) -> str:
    """Convert URL to a 32-character hex cache key. Never fails."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


def path_for(key: str) -> str:
    """
    Convert a key like c29ab7f54b2df7773722d382f4809d65
    to a relative path like c/29/b7f54b2df7773722d382f4809d65.

    Raises:
        KeyTooShortError: if the key has 4 characters or fewer.
    """
    if len(key) < MIN_KEY_LENGTH:
        raise KeyTooShortError(key)
    return f"{key[0:1]}/{key[1:3]}/{key[4:]}"


class ShardedFileCache:
    """
    Byte-exact read/write/delete of cached images under a root directory.

    Writes are plain overwrites. Concurrent writers for the same URL race
    and the last one wins.
    """

    def __init__(self, cache_dir: Union[str, Path] = "./image_cache"):
        self._cache_dir = Path(cache_dir)
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"[ImageCache] Cache directory: {self._cache_dir}")

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def entry_path(self, url: str) -> Path:
        """Absolute filesystem location of the entry for a URL."""
        return self._cache_dir / path_for(key_for(url))

    def get(self, url: str) -> bytes:
        """
        Read the cached image for a URL.

        Raises:
            CacheMissError: no entry for this URL.
            CacheIOError: the entry exists but could not be read.
        """
        cache_path = self._resolve(url)
        try:
            data = cache_path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"[ImageCache] Cache miss: {url[:60]}")
            raise CacheMissError(f"no cache entry at {cache_path}", url=url)
        except OSError as e:
            logger.error(f"[ImageCache] Failed to read cache {cache_path}: {e}")
            raise CacheIOError(f"failed to read {cache_path}: {e}", url=url, original=e)

        logger.debug(f"[ImageCache] Cache hit: {url[:60]} ({len(data)} bytes)")
        return data

    def put(self, url: str, data: bytes) -> str:
        """
        Store image bytes for a URL, overwriting any existing entry.

        Returns:
            The cache key.
        """
        key = key_for(url)
        relative_path = path_for(key)
        cache_path = self._cache_dir / relative_path
        try:
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            cache_path.write_bytes(data)
        except OSError as e:
            logger.error(f"[ImageCache] Failed to cache {url[:60]}: {e}")
            raise CacheIOError(f"failed to write {cache_path}: {e}", url=url, original=e)

        logger.info(f"[ImageCache] Cached: {url[:60]} -> {relative_path} ({len(data)} bytes)")
        return key

    def delete(self, url: str, prune_dirs: bool = False) -> None:
        """
        Remove the entry for a URL.

        With prune_dirs, also remove the second-level and then the
        top-level shard directory. Removal fails when a directory still
        holds other entries, so siblings are never destroyed.
        """
        cache_path = self._resolve(url)
        try:
            cache_path.unlink()
        except FileNotFoundError:
            raise CacheMissError(f"no cache entry at {cache_path}", url=url)
        except OSError as e:
            raise CacheIOError(f"failed to remove {cache_path}: {e}", url=url, original=e)

        logger.info(f"[ImageCache] Removed: {url[:60]}")
        if not prune_dirs:
            return

        # cache_dir/s/ss, then cache_dir/s
        for shard_dir in (cache_path.parent, cache_path.parent.parent):
            try:
                os.rmdir(shard_dir)
            except OSError as e:
                raise CacheIOError(
                    f"failed to remove shard directory {shard_dir}: {e}",
                    url=url,
                    original=e,
                )

    def _resolve(self, url: str) -> Path:
        try:
            return self._cache_dir / path_for(key_for(url))
        except KeyTooShortError as e:
            e.url = url
            raise
