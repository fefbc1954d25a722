"""
Pytest fixtures for the fake LocationEvent API, gateways and controllers.

Two ways in:
- `api` + `gateway` + `controller` run the real HttpEventGateway against an
  in-memory FastAPI app over httpx's ASGI transport.
- `stub_gateway` + `stub_controller` skip HTTP entirely; calls can be held
  open with asyncio.Event gates to force interleavings.
"""

import asyncio
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tests.factories import NOW
from tests.fake_api import FakeApiState, create_fake_api
from venue_events.core.errors import GatewayError
from venue_events.infrastructure.event_gateway import HttpEventGateway
from venue_events.schemas.application import Application, ApplicationStatus, Photographer
from venue_events.schemas.booking import Booking
from venue_events.schemas.event import CreateEventRequest, Event, EventStatus, UpdateEventRequest
from venue_events.schemas.statistics import EventStatistics
from venue_events.services.event_controller import EventLifecycleController
from venue_events.services.interfaces.gateway import EventGateway


class StubGateway(EventGateway):
    """In-memory gateway. `gates[name]` holds the next call to `name` until set."""

    def __init__(self):
        self.events: dict[int, Event] = {}
        self.applications: dict[int, list[Application]] = {}
        self.bookings: dict[int, list[Booking]] = {}
        self.statistics: dict[int, EventStatistics] = {}
        self.failing_locations: set[int] = set()
        self.errors: dict[str, GatewayError] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple] = []
        self.next_event_id = 200

    def hold(self, name: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[name] = gate
        return gate

    def called(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        gate = self.gates.pop(name, None)
        if gate is not None:
            await gate.wait()
        error = self.errors.get(name)
        if error is not None:
            raise error

    async def list_events(self, location_id: int) -> list[Event]:
        await self._enter("list_events", location_id)
        if location_id in self.failing_locations:
            raise GatewayError("Location unavailable", status_code=503)
        return [e for e in self.events.values() if e.location_id == location_id]

    async def get_event(self, event_id: int) -> Optional[Event]:
        await self._enter("get_event", event_id)
        return self.events.get(event_id)

    async def create_event(self, request: CreateEventRequest) -> Event:
        await self._enter("create_event", request)
        event = Event(
            event_id=self.next_event_id,
            status=EventStatus.DRAFT,
            **request.model_dump(exclude_none=True),
        )
        self.next_event_id += 1
        self.events[event.event_id] = event
        return event

    async def update_event(self, event_id: int, request: UpdateEventRequest) -> Event:
        await self._enter("update_event", event_id, request)
        event = self.events[event_id].model_copy(update=request.model_dump(exclude_none=True))
        self.events[event_id] = event
        return event

    async def update_event_status(self, event_id: int, status: EventStatus) -> None:
        await self._enter("update_event_status", event_id, status)
        self.events[event_id] = self.events[event_id].model_copy(update={"status": status})

    async def delete_event(self, event_id: int) -> None:
        await self._enter("delete_event", event_id)
        self.events.pop(event_id, None)

    async def list_applications(self, event_id: int) -> list[Application]:
        await self._enter("list_applications", event_id)
        return list(self.applications.get(event_id, []))

    async def respond_to_application(
        self,
        event_id: int,
        photographer_id: int,
        status: ApplicationStatus,
        rejection_reason: Optional[str] = None,
    ) -> None:
        await self._enter("respond_to_application", event_id, photographer_id, status, rejection_reason)

    async def list_bookings(self, event_id: int) -> list[Booking]:
        await self._enter("list_bookings", event_id)
        return list(self.bookings.get(event_id, []))

    async def get_statistics(self, event_id: int) -> Optional[EventStatistics]:
        await self._enter("get_statistics", event_id)
        return self.statistics.get(event_id)

    async def list_approved_photographers(self, event_id: int) -> list[Photographer]:
        await self._enter("list_approved_photographers", event_id)
        return [
            a.photographer
            for a in self.applications.get(event_id, [])
            if a.status == ApplicationStatus.APPROVED
        ]


async def wait_for_call(gateway: StubGateway, name: str, count: int = 1) -> None:
    """Yield to the loop until `gateway` has seen `count` calls to `name`."""
    for _ in range(200):
        if len(gateway.called(name)) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"{name} was never called")


@pytest.fixture
def api() -> FakeApiState:
    """Fresh in-memory API state for each test."""
    return FakeApiState()


@pytest_asyncio.fixture(scope="function")
async def http_client(api: FakeApiState) -> AsyncGenerator[AsyncClient, None]:
    """httpx client wired straight into the fake API."""
    transport = ASGITransport(app=create_fake_api(api))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def gateway(http_client: AsyncClient) -> HttpEventGateway:
    return HttpEventGateway(http_client, token_provider=lambda: "test-token")


@pytest.fixture
def controller(gateway: HttpEventGateway) -> EventLifecycleController:
    """Controller over the fake API with the clock pinned to NOW."""
    return EventLifecycleController(gateway, clock=lambda: NOW)


@pytest.fixture
def stub_gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def stub_controller(stub_gateway: StubGateway) -> EventLifecycleController:
    return EventLifecycleController(stub_gateway, clock=lambda: NOW)
