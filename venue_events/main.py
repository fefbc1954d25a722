"""
Venue Events Client - Session Entry Point

Wires the lifecycle engine to the LocationEvent API:
- Structured logging configured once per process
- One shared httpx connection pool, closed when the session ends
- A controller per session owning its own projections

Usage:
    async with lifecycle_session(token_provider=load_token) as controller:
        await controller.load_events(location_id=42)
        await controller.change_status(event_id, "Open")
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from venue_events.core.config import get_settings
from venue_events.core.logging import setup_logging, get_logger
from venue_events.infrastructure.event_gateway import HttpEventGateway, TokenProvider
from venue_events.infrastructure.http_client import get_http_client, close_http_client
from venue_events.services.event_controller import EventLifecycleController

settings = get_settings()


@asynccontextmanager
async def lifecycle_session(
    token_provider: Optional[TokenProvider] = None,
) -> AsyncIterator[EventLifecycleController]:
    """Session lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "session_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        api=settings.API_BASE_URL,
    )

    if token_provider is None and settings.API_TOKEN:
        static_token = settings.API_TOKEN
        token_provider = lambda: static_token  # noqa: E731

    gateway = HttpEventGateway(get_http_client(), token_provider=token_provider)
    controller = EventLifecycleController(gateway, settings=settings)

    try:
        yield controller
    finally:
        await close_http_client()
        logger.info("session_closed")
