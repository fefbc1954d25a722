from venue_events.schemas.event import (
    EventStatus, Event, EventLocation, EventImage,
    CreateEventRequest, UpdateEventRequest, EventFilters,
)
from venue_events.schemas.application import (
    ApplicationStatus, Application, ApplicationResponse, Photographer,
)
from venue_events.schemas.booking import BookingStatus, Booking, BookingParty
from venue_events.schemas.statistics import (
    EventStatistics, LocationEvents, DashboardSummary, EventsDashboard,
)

__all__ = [
    "EventStatus", "Event", "EventLocation", "EventImage",
    "CreateEventRequest", "UpdateEventRequest", "EventFilters",
    "ApplicationStatus", "Application", "ApplicationResponse", "Photographer",
    "BookingStatus", "Booking", "BookingParty",
    "EventStatistics", "LocationEvents", "DashboardSummary", "EventsDashboard",
]
