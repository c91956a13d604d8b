"""
Image cache 测试配置文件

这个文件包含 pytest fixtures（测试夹具）。
所有源站请求都由 httpx.MockTransport 伪造，测试不会访问网络。
"""

import sys
from pathlib import Path

import httpx
import pytest

# 添加 backend 目录到 Python 路径
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from imgcache.cache_manager import ShardedFileCache
from imgcache.fetcher import OriginFetcher


# ============================================
# Sample payloads
# ============================================

# JFIF header followed by filler; enough for signature sniffing
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00" + b"\x00" * 600

# 1x1 white PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\xff"
    b"\xff?\x03\x00\x08\xfc\x02\xfe\xa7\x9a\xa0\xa0\x00\x00\x00\x00IEND\xaeB`\x82"
)

SVG_BYTES = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b'<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10">'
    b'<rect width="10" height="10"/></svg>'
)

HTML_BYTES = b"<!DOCTYPE html><html><body>not an image</body></html>"


@pytest.fixture
def jpeg_bytes():
    return JPEG_BYTES


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def svg_bytes():
    return SVG_BYTES


# ============================================
# Cache Fixtures
# ============================================

@pytest.fixture
def cache(tmp_path):
    """每个测试使用独立的缓存目录"""
    return ShardedFileCache(tmp_path / "image_cache")


# ============================================
# Origin Fixtures
# ============================================

class FakeOrigin:
    """
    伪造的源站：按 URL 返回预置响应，并记录请求次数。

    使用方式：
    ```python
    origin = FakeOrigin({"https://img.test/a.jpg": (200, JPEG_BYTES)})
    fetcher = origin.fetcher()
    ```
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url not in self.routes:
            return httpx.Response(404, content=b"not found")
        status, body = self.routes[url]
        return httpx.Response(status, content=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler),
            follow_redirects=True,
        )

    def fetcher(self, timeout: float = 10.0) -> OriginFetcher:
        return OriginFetcher(timeout=timeout, http_client=self.client())


class CountingFetcher:
    """Resolver test double: returns fixed bytes (or raises) and counts calls."""

    def __init__(self, data: bytes = JPEG_BYTES, error: Exception = None):
        self.data = data
        self.error = error
        self.calls = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.data


@pytest.fixture
def fake_origin():
    return FakeOrigin({
        "https://img.test/photo.jpg": (200, JPEG_BYTES),
        "https://img.test/icon.png": (200, PNG_BYTES),
        "https://img.test/logo.svg": (200, SVG_BYTES),
        "https://img.test/page.html": (200, HTML_BYTES),
        "https://img.test/broken.jpg": (500, b"server error"),
    })


@pytest.fixture
def counting_fetcher():
    return CountingFetcher()


# ============================================
# Helper Functions
# ============================================

def assert_no_cache_files(cache: ShardedFileCache):
    """断言缓存目录中没有任何文件"""
    files = [p for p in cache.cache_dir.rglob("*") if p.is_file()]
    assert files == [], f"Cache should be empty, found: {files}"
