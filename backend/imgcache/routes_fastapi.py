"""
Image Cache API Routes

Single catch-all endpoint:
- GET /?url=<image url>  -> 200 with image bytes, sniffed Content-Type
- GET / (no url)         -> 200, empty body (health check)
- any fetch/cache error  -> 404, empty body
- any other method       -> 503
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import Response

from .errors import ImageCacheError
from .metrics import REQUESTS_ERROR, REQUESTS_SUCCESS
from .sniffer import SNIFF_LENGTH, is_image_type, sniff_content_type

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# ============================================
# Router
# ============================================

router = APIRouter(tags=["Image Cache"])


# ============================================
# Endpoints
# ============================================

@router.api_route("/{path:path}", methods=ALL_METHODS)
async def serve_image(request: Request, path: str):
    """
    Serve an image through the cache.

    This endpoint:
    1. Checks if the image is already cached
    2. If not, fetches it from the origin and validates it is an image
    3. Caches the image for future requests
    4. Returns the image with its sniffed content-type

    Example:
        GET /?url=https://example.com/image.jpg
    """
    if request.method != "GET":
        return Response(status_code=503)

    # First value wins when the parameter is repeated
    urls = request.query_params.getlist("url")
    url = urls[0] if urls else ""
    if request.url.path == "/" and url == "":
        return Response(status_code=200)

    resolver = request.app.state.resolver
    metrics = request.app.state.metrics

    try:
        resolved = await resolver.resolve_entry(url)
    except ImageCacheError as e:
        logger.warning(f"[ImageRoutes] {e.kind.value}: {url[:60]} ({e.message})")
        metrics.increment(REQUESTS_ERROR)
        return Response(status_code=404)

    # Entries are re-sniffed on every serve; nothing else is stored with them
    content_type = sniff_content_type(resolved.data[:SNIFF_LENGTH]).lower()
    if not is_image_type(content_type):
        logger.warning(f"[ImageRoutes] Cached entry is not an image ({content_type}): {url[:60]}")
        metrics.increment(REQUESTS_ERROR)
        return Response(status_code=404)

    metrics.increment(REQUESTS_SUCCESS)
    return Response(
        content=resolved.data,
        media_type=content_type,
        headers={"X-Cache": "HIT" if resolved.cache_hit else "MISS"},
    )
