"""
Image Cache Configuration

Settings come from environment variables; command-line flags override
them in the entrypoint.
"""

import os
from typing import Tuple

from pydantic import BaseModel, Field

from .fetcher import FETCH_TIMEOUT_SECONDS

DEFAULT_ADDRESS = ":8081"
DEFAULT_CACHE_DIR = "./image_cache"

_TRUE_VALUES = ("true", "1", "yes")


class ImageCacheSettings(BaseModel):
    """Runtime configuration for the image cache service."""
    address: str = Field(DEFAULT_ADDRESS, description="host:port to listen on")
    cache_dir: str = Field(DEFAULT_CACHE_DIR, description="Root directory of the sharded cache")
    fetch_timeout: float = Field(FETCH_TIMEOUT_SECONDS, gt=0, description="Origin fetch deadline in seconds")
    cache_enabled: bool = Field(True, description="False serves straight from origin without storing")
    log_level: str = Field("INFO", description="Root logging level")

    @classmethod
    def from_env(cls) -> "ImageCacheSettings":
        return cls(
            address=os.getenv("IMGCACHE_ADDRESS", DEFAULT_ADDRESS),
            cache_dir=os.getenv("IMAGE_CACHE_DIR", DEFAULT_CACHE_DIR),
            fetch_timeout=float(os.getenv("IMAGE_FETCH_TIMEOUT_SECONDS", str(FETCH_TIMEOUT_SECONDS))),
            cache_enabled=os.getenv("IMAGE_CACHE_ENABLED", "true").lower() in _TRUE_VALUES,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a "host:port" listen address.

    An empty host (":8081") listens on all interfaces. IPv6 hosts may be
    bracketed ("[::1]:8081").
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid address (missing port): {address!r}")
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in address: {address!r}")
    if not 0 <= port_number <= 65535:
        raise ValueError(f"Port out of range in address: {address!r}")

    host = host.strip("[]") or "0.0.0.0"
    return host, port_number
