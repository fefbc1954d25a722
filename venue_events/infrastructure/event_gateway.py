"""
HTTP implementation of EventGateway over the /api/LocationEvent endpoints.

Response handling
=================

  2xx   -> body unwrapped from an optional {"data": ...} envelope and normalized
  404   -> [] for list endpoints, None for detail/statistics
  other -> GatewayError carrying the status code and the best message the body offers

Network failures and payloads that do not match the schemas also become
GatewayError. Nothing is retried here: a failed call is reported once and the
caller decides whether to try again.
"""

import inspect
import json
import time
import uuid
from typing import Any, Awaitable, Callable, Optional, Union

import httpx
from pydantic import ValidationError

from venue_events.core.config import get_settings
from venue_events.core.errors import GatewayError
from venue_events.core.logging import get_logger
from venue_events.core.metrics import record_gateway_request
from venue_events.infrastructure import normalization
from venue_events.schemas.application import (
    Application,
    ApplicationResponse,
    ApplicationStatus,
    Photographer,
)
from venue_events.schemas.booking import Booking
from venue_events.schemas.event import CreateEventRequest, Event, EventStatus, UpdateEventRequest
from venue_events.schemas.statistics import EventStatistics
from venue_events.services.interfaces.gateway import EventGateway

logger = get_logger(__name__)

TokenProvider = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]

_MESSAGE_KEYS = ("message", "detail", "title", "error")


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort human-readable message from an error response."""
    text = response.text.strip()
    try:
        body = json.loads(text) if text else None
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in _MESSAGE_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    elif isinstance(body, str) and body.strip():
        return body.strip()

    return text or f"HTTP {response.status_code}"


class HttpEventGateway(EventGateway):
    """Talks to the LocationEvent API through a shared httpx.AsyncClient."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_provider: Optional[TokenProvider] = None,
        prefix: Optional[str] = None,
    ):
        self.client = client
        self.token_provider = token_provider
        self.prefix = (prefix if prefix is not None else get_settings().API_PREFIX).rstrip("/")

    async def _auth_headers(self, operation: str) -> dict:
        if self.token_provider is None:
            return {}
        try:
            token = self.token_provider()
            if inspect.isawaitable(token):
                token = await token
        except Exception as e:
            record_gateway_request(operation, "error", 0.0)
            logger.error("token_provider_failed", operation=operation, error=str(e) or type(e).__name__)
            raise GatewayError("Could not obtain access token") from e
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        not_found_ok: bool = False,
    ) -> Optional[httpx.Response]:
        """
        Send one request. Returns None for a tolerated 404, raises GatewayError
        for every other failure.
        """
        request_id = str(uuid.uuid4())[:8]
        log = logger.bind(operation=operation, request_id=request_id, method=method, path=path)
        headers = await self._auth_headers(operation)

        start_time = time.perf_counter()
        try:
            response = await self.client.request(
                method,
                f"{self.prefix}{path}",
                json=json_body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            duration = time.perf_counter() - start_time
            record_gateway_request(operation, "error", duration)
            log.error("gateway_request_failed", error=str(e) or type(e).__name__)
            raise GatewayError(str(e) or "Network error") from e

        duration = time.perf_counter() - start_time
        duration_ms = round(duration * 1000, 2)

        if response.status_code == 404 and not_found_ok:
            record_gateway_request(operation, "not_found", duration)
            log.info("gateway_not_found", duration_ms=duration_ms)
            return None

        if not response.is_success:
            record_gateway_request(operation, "error", duration)
            message = extract_error_message(response)
            log.warning(
                "gateway_request_rejected",
                status_code=response.status_code,
                error=message,
                duration_ms=duration_ms,
            )
            raise GatewayError(message, status_code=response.status_code)

        record_gateway_request(operation, "success", duration)
        log.debug("gateway_request_completed", status_code=response.status_code, duration_ms=duration_ms)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError("Invalid response format", status_code=response.status_code) from e

    @staticmethod
    def _parse(parser: Callable[[Any], Any], raw: Any) -> Any:
        try:
            return parser(raw)
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            logger.warning("gateway_payload_invalid", error=str(e))
            raise GatewayError("Invalid response format") from e

    async def _list(self, operation: str, path: str, parser: Callable[[dict], Any], allow_single: bool = False) -> list:
        response = await self._request(operation, "GET", path, not_found_ok=True)
        if response is None:
            return []
        items = normalization.as_list(self._json(response), allow_single=allow_single)
        return [self._parse(parser, item) for item in items]

    def _single(self, response: httpx.Response, parser: Callable[[dict], Any]) -> Any:
        payload = normalization.unwrap(self._json(response))
        if not isinstance(payload, dict):
            raise GatewayError("Invalid response format", status_code=response.status_code)
        return self._parse(parser, payload)

    async def list_events(self, location_id: int) -> list[Event]:
        return await self._list(
            "list_events",
            f"/location/{location_id}",
            normalization.normalize_event,
            allow_single=True,
        )

    async def get_event(self, event_id: int) -> Optional[Event]:
        response = await self._request("get_event", "GET", f"/{event_id}/detail", not_found_ok=True)
        if response is None:
            return None
        return self._single(response, normalization.normalize_event)

    async def create_event(self, request: CreateEventRequest) -> Event:
        response = await self._request("create_event", "POST", "", json_body=request.to_payload())
        return self._single(response, normalization.normalize_event)

    async def update_event(self, event_id: int, request: UpdateEventRequest) -> Event:
        response = await self._request(
            "update_event", "PUT", f"/{event_id}", json_body=request.to_payload()
        )
        return self._single(response, normalization.normalize_event)

    async def update_event_status(self, event_id: int, status: EventStatus) -> None:
        await self._request(
            "update_event_status", "PATCH", f"/{event_id}/status", json_body=EventStatus(status).value
        )

    async def delete_event(self, event_id: int) -> None:
        await self._request("delete_event", "DELETE", f"/{event_id}")

    async def list_applications(self, event_id: int) -> list[Application]:
        return await self._list(
            "list_applications", f"/{event_id}/applications", normalization.normalize_application
        )

    async def respond_to_application(
        self,
        event_id: int,
        photographer_id: int,
        status: ApplicationStatus,
        rejection_reason: Optional[str] = None,
    ) -> None:
        body = ApplicationResponse(
            event_id=event_id,
            photographer_id=photographer_id,
            status=status,
            rejection_reason=rejection_reason,
        )
        await self._request(
            "respond_to_application", "POST", "/respond-application", json_body=body.to_payload()
        )

    async def list_bookings(self, event_id: int) -> list[Booking]:
        return await self._list("list_bookings", f"/{event_id}/bookings", normalization.normalize_booking)

    async def get_statistics(self, event_id: int) -> Optional[EventStatistics]:
        response = await self._request(
            "get_statistics", "GET", f"/{event_id}/statistics", not_found_ok=True
        )
        if response is None:
            return None
        return self._single(response, normalization.normalize_statistics)

    async def list_approved_photographers(self, event_id: int) -> list[Photographer]:
        return await self._list(
            "list_approved_photographers",
            f"/{event_id}/approved-photographers",
            normalization.normalize_photographer,
        )
