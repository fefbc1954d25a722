"""
Derived statistics for events and the multi-location dashboard.

Everything here is pure: the same applications/bookings always give the same
numbers. Revenue sums every booking whatever its status (cancelled bookings
included), matching what the API reports.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from venue_events.schemas.application import Application, ApplicationStatus
from venue_events.schemas.booking import Booking
from venue_events.schemas.common import as_utc
from venue_events.schemas.event import Event, EventStatus
from venue_events.schemas.statistics import (
    DashboardSummary,
    EventStatistics,
    EventsDashboard,
    LocationEvents,
)

ZERO = Decimal("0")


def _count(applications: Iterable[Application], status: ApplicationStatus) -> int:
    return sum(1 for application in applications if application.status == status)


def recompute(
    applications: Sequence[Application],
    bookings: Sequence[Booking],
    event: Optional[Event] = None,
) -> EventStatistics:
    """Statistics for one event from its applications and bookings."""
    total_bookings = len(bookings)
    total_revenue = sum((booking.total_amount for booking in bookings), ZERO)
    average = total_revenue / total_bookings if total_bookings > 0 else ZERO

    return EventStatistics(
        event_id=event.event_id if event else None,
        event_name=event.name if event else None,
        event_status=event.status if event else None,
        total_applications=len(applications),
        approved_applications=_count(applications, ApplicationStatus.APPROVED),
        rejected_applications=_count(applications, ApplicationStatus.REJECTED),
        pending_applications=_count(applications, ApplicationStatus.APPLIED),
        total_bookings=total_bookings,
        total_revenue=total_revenue,
        average_booking_value=average,
    )


def with_application_counts(
    statistics: EventStatistics,
    applications: Sequence[Application],
) -> EventStatistics:
    """Refresh only the application counts, keeping booking and revenue figures."""
    return statistics.model_copy(update={
        "total_applications": len(applications),
        "approved_applications": _count(applications, ApplicationStatus.APPROVED),
        "rejected_applications": _count(applications, ApplicationStatus.REJECTED),
        "pending_applications": _count(applications, ApplicationStatus.APPLIED),
    })


def application_counters(applications: Sequence[Application]) -> dict:
    """Event counters derived from the event's applications."""
    return {
        "approved_photographers_count": _count(applications, ApplicationStatus.APPROVED),
        "total_applications_count": len(applications),
        "pending_applications_count": _count(applications, ApplicationStatus.APPLIED),
    }


def booking_counters(bookings: Sequence[Booking]) -> dict:
    """Event counters derived from the event's bookings."""
    return {"total_bookings_count": len(bookings)}


def _is_upcoming(event: Event, now: datetime) -> bool:
    if event.status == EventStatus.OPEN:
        return True
    return event.status == EventStatus.DRAFT and as_utc(event.start_date) > as_utc(now)


def _estimated_revenue(event: Event) -> Decimal:
    price = event.discounted_price or event.original_price or ZERO
    return event.total_bookings_count * price


def summarize_location(location_id: int, events: Sequence[Event], now: datetime) -> LocationEvents:
    location_name = f"Location {location_id}"
    if events and events[0].location is not None:
        location_name = events[0].location.name

    return LocationEvents(
        location_id=location_id,
        location_name=location_name,
        events=tuple(events),
        active_events_count=sum(1 for e in events if e.status == EventStatus.ACTIVE),
        upcoming_events_count=sum(1 for e in events if _is_upcoming(e, now)),
        total_revenue=sum((_estimated_revenue(e) for e in events), ZERO),
    )


def summarize_dashboard(locations: Sequence[LocationEvents]) -> EventsDashboard:
    summary = DashboardSummary(
        total_locations=len(locations),
        total_events=sum(len(loc.events) for loc in locations),
        active_events=sum(loc.active_events_count for loc in locations),
        upcoming_events=sum(loc.upcoming_events_count for loc in locations),
        total_revenue=sum((loc.total_revenue for loc in locations), ZERO),
        total_bookings=sum(e.total_bookings_count for loc in locations for e in loc.events),
    )
    return EventsDashboard(locations=tuple(locations), summary=summary)
