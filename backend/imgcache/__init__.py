"""
Image Cache Module

Pull-through cache for remote images: the first request for a URL fetches
the image from its origin, validates it by content sniffing and stores it
on disk; later requests are served from the stored copy.

Features:
- MD5-keyed, two-level sharded file layout
- Magic-byte content-type validation (image/* only)
- Get-or-populate resolver with no retries
"""

from .cache_manager import ShardedFileCache, key_for, path_for
from .errors import (
    BadStatusError,
    CacheError,
    CacheIOError,
    CacheMissError,
    ErrorKind,
    FetchError,
    FetchNetworkError,
    FetchTimeoutError,
    ImageCacheError,
    KeyTooShortError,
    NotAnImageError,
)
from .fetcher import OriginFetcher
from .metrics import InMemoryMetrics, MetricsSink
from .resolver import ImageResolver, ResolvedImage
from .sniffer import is_image_type, sniff_content_type

__all__ = [
    "ShardedFileCache",
    "key_for",
    "path_for",
    "OriginFetcher",
    "ImageResolver",
    "ResolvedImage",
    "InMemoryMetrics",
    "MetricsSink",
    "sniff_content_type",
    "is_image_type",
    "ErrorKind",
    "ImageCacheError",
    "CacheError",
    "KeyTooShortError",
    "CacheMissError",
    "CacheIOError",
    "FetchError",
    "FetchTimeoutError",
    "FetchNetworkError",
    "BadStatusError",
    "NotAnImageError",
]
