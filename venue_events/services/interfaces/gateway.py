"""
Remote event gateway interface.
The controller depends only on this; the HTTP adapter lives in infrastructure.
"""

from abc import ABC, abstractmethod
from typing import Optional

from venue_events.schemas.application import Application, ApplicationStatus, Photographer
from venue_events.schemas.booking import Booking
from venue_events.schemas.event import CreateEventRequest, Event, EventStatus, UpdateEventRequest
from venue_events.schemas.statistics import EventStatistics


class EventGateway(ABC):
    """
    Network boundary for venue events.

    Implementations return canonical schema objects, translate "not found" on
    list endpoints into empty lists, and raise GatewayError for anything else
    that goes wrong. They never retry.
    """

    @abstractmethod
    async def list_events(self, location_id: int) -> list[Event]:
        """Events of one venue location. Empty if the location has none."""
        ...

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[Event]:
        """Event detail with nested location and images, or None if unknown."""
        ...

    @abstractmethod
    async def create_event(self, request: CreateEventRequest) -> Event:
        ...

    @abstractmethod
    async def update_event(self, event_id: int, request: UpdateEventRequest) -> Event:
        ...

    @abstractmethod
    async def update_event_status(self, event_id: int, status: EventStatus) -> None:
        ...

    @abstractmethod
    async def delete_event(self, event_id: int) -> None:
        ...

    @abstractmethod
    async def list_applications(self, event_id: int) -> list[Application]:
        ...

    @abstractmethod
    async def respond_to_application(
        self,
        event_id: int,
        photographer_id: int,
        status: ApplicationStatus,
        rejection_reason: Optional[str] = None,
    ) -> None:
        ...

    @abstractmethod
    async def list_bookings(self, event_id: int) -> list[Booking]:
        ...

    @abstractmethod
    async def get_statistics(self, event_id: int) -> Optional[EventStatistics]:
        """Server-side statistics, or None if the server has none for the event."""
        ...

    @abstractmethod
    async def list_approved_photographers(self, event_id: int) -> list[Photographer]:
        ...
