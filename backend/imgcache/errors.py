"""
Image Cache Errors

Closed set of error kinds raised by the cache and the origin fetcher.
The HTTP layer collapses all of them into a single 404; the kind is kept
for logging and tests.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Every failure the pipeline can produce."""
    # Cache storage
    KEY_TOO_SHORT = "key_too_short"
    NOT_FOUND = "not_found"
    IO_FAILURE = "io_failure"

    # Origin fetch
    TIMEOUT = "timeout"
    NETWORK = "network"
    BAD_STATUS = "bad_status"
    NOT_AN_IMAGE = "not_an_image"


class ImageCacheError(Exception):
    """Base exception for all image cache errors."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str = "",
        kind: Optional[ErrorKind] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.url = url


# ============================================
# Cache errors
# ============================================

class CacheError(ImageCacheError):
    """Failure reading or writing the on-disk cache."""


class KeyTooShortError(CacheError):
    """Cache key too short to be split into shard directories."""

    kind = ErrorKind.KEY_TOO_SHORT

    def __init__(self, key: str, url: Optional[str] = None):
        super().__init__(f"cache key too short: {key!r}", url=url)
        self.key = key


class CacheMissError(CacheError):
    """No cache entry for the URL."""

    kind = ErrorKind.NOT_FOUND


class CacheIOError(CacheError):
    """Filesystem error other than a missing entry."""

    kind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str = "",
        url: Optional[str] = None,
        original: Optional[BaseException] = None,
    ):
        super().__init__(message, url=url)
        self.original = original


# ============================================
# Fetch errors
# ============================================

class FetchError(ImageCacheError):
    """Failure loading an image from its origin."""

    kind = ErrorKind.NETWORK


class FetchTimeoutError(FetchError):
    """Origin did not answer before the deadline."""

    kind = ErrorKind.TIMEOUT


class FetchNetworkError(FetchError):
    """Connection-level failure (DNS, refused, reset, bad URL)."""

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str = "",
        url: Optional[str] = None,
        original: Optional[BaseException] = None,
    ):
        super().__init__(message, url=url)
        self.original = original


class BadStatusError(FetchError):
    """Origin answered with a status code >= 300."""

    kind = ErrorKind.BAD_STATUS

    def __init__(self, status_code: int, url: Optional[str] = None):
        super().__init__(f"origin returned HTTP {status_code}", url=url)
        self.status_code = status_code


class NotAnImageError(FetchError):
    """Sniffed content type is not image/*."""

    kind = ErrorKind.NOT_AN_IMAGE

    def __init__(self, content_type: str, url: Optional[str] = None):
        super().__init__(f"not an image: {content_type}", url=url)
        self.content_type = content_type
