"""
Derived aggregates: per-event statistics and the multi-location dashboard.
"""

from decimal import Decimal
from typing import Optional

from venue_events.schemas.common import ApiModel, Money
from venue_events.schemas.event import Event, EventStatus


class EventStatistics(ApiModel):
    event_id: Optional[int] = None
    event_name: Optional[str] = None
    event_status: Optional[EventStatus] = None
    total_applications: int = 0
    approved_applications: int = 0
    rejected_applications: int = 0
    pending_applications: int = 0
    total_bookings: int = 0
    total_revenue: Money = Decimal("0")
    average_booking_value: Money = Decimal("0")


class LocationEvents(ApiModel):
    location_id: int
    location_name: str
    events: tuple[Event, ...] = ()
    active_events_count: int = 0
    upcoming_events_count: int = 0
    total_revenue: Money = Decimal("0")


class DashboardSummary(ApiModel):
    total_locations: int = 0
    total_events: int = 0
    active_events: int = 0
    upcoming_events: int = 0
    total_revenue: Money = Decimal("0")
    total_bookings: int = 0


class EventsDashboard(ApiModel):
    locations: tuple[LocationEvents, ...] = ()
    summary: DashboardSummary = DashboardSummary()
