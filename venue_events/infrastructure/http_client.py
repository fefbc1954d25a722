"""
Shared httpx client for the LocationEvent API.
One connection pool per process, created lazily and closed on shutdown.
"""

from typing import Optional

import httpx

from venue_events.core.config import get_settings
from venue_events.core.logging import get_logger

logger = get_logger(__name__)

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared AsyncClient."""
    global _http_client

    if _http_client is None or _http_client.is_closed:
        settings = get_settings()
        _http_client = httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
            headers={"Accept": "application/json"},
        )
        logger.info("http_client_created", base_url=settings.API_BASE_URL)

    return _http_client


async def close_http_client() -> None:
    """Close the shared client on shutdown."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
        logger.info("http_client_closed")
