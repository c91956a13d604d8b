"""
Image Cache Application

Wires the cache, fetcher, resolver and metrics into a FastAPI app.
Components are built eagerly and kept on app.state so the app works with
or without a lifespan-running server.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .cache_manager import ShardedFileCache
from .config import ImageCacheSettings
from .fetcher import OriginFetcher
from .metrics import InMemoryMetrics, MetricsSink
from .resolver import ImageResolver, ImageSource
from .routes_fastapi import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[ImageCacheSettings] = None,
    *,
    cache: Optional[ShardedFileCache] = None,
    fetcher: Optional[ImageSource] = None,
    metrics: Optional[MetricsSink] = None,
) -> FastAPI:
    """Build the image cache app; explicit components override settings."""
    settings = settings or ImageCacheSettings.from_env()
    cache = cache or ShardedFileCache(settings.cache_dir)
    fetcher = fetcher or OriginFetcher(timeout=settings.fetch_timeout)
    metrics = metrics or InMemoryMetrics()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"[ImageCache] Serving from {cache.cache_dir} "
            f"(cache {'enabled' if settings.cache_enabled else 'disabled'})"
        )
        yield
        close = getattr(fetcher, "close", None)
        if close is not None:
            await close()
        counters = metrics.snapshot() if hasattr(metrics, "snapshot") else {}
        logger.info(f"[ImageCache] Bye {datetime.now().isoformat()} {counters}")

    # No docs routes: every path belongs to the image endpoint
    app = FastAPI(
        title="imgproxycache",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.cache = cache
    app.state.metrics = metrics
    app.state.resolver = ImageResolver(
        cache=cache,
        fetcher=fetcher,
        use_cache=settings.cache_enabled,
    )
    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
        # Methods the router does not list (TRACE, CONNECT, WebDAV verbs...)
        # get the same empty 503 as every other non-GET request
        if exc.status_code == 405:
            return Response(status_code=503)
        return await http_exception_handler(request, exc)

    return app
