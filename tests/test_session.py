"""
Tests for session wiring: shared HTTP client and token setup.
"""

import logging

import pytest

from venue_events import main
from venue_events.core.logging import setup_logging
from venue_events.infrastructure import http_client
from venue_events.infrastructure.event_gateway import HttpEventGateway
from venue_events.services.event_controller import EventLifecycleController


@pytest.mark.asyncio
async def test_session_builds_controller_and_closes_client():
    async with main.lifecycle_session() as controller:
        assert isinstance(controller, EventLifecycleController)
        assert isinstance(controller.gateway, HttpEventGateway)
        client = controller.gateway.client
        assert client is http_client.get_http_client()
        assert str(client.base_url).startswith(main.settings.API_BASE_URL)

    assert client.is_closed
    assert http_client._http_client is None


def test_setup_logging_installs_one_handler():
    setup_logging()
    setup_logging(level="debug")

    root = logging.getLogger()
    assert sum(1 for h in root.handlers if h.get_name() == "venue_events") == 1
    assert root.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


@pytest.mark.asyncio
async def test_session_uses_static_token(monkeypatch):
    monkeypatch.setattr(main.settings, "API_TOKEN", "static-token")

    async with main.lifecycle_session() as controller:
        assert controller.gateway.token_provider() == "static-token"


@pytest.mark.asyncio
async def test_explicit_token_provider_wins(monkeypatch):
    monkeypatch.setattr(main.settings, "API_TOKEN", "static-token")

    async with main.lifecycle_session(token_provider=lambda: "user-token") as controller:
        assert controller.gateway.token_provider() == "user-token"
