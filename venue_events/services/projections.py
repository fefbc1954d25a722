"""
Local projections of remote event data.

EventState is an immutable snapshot. Reducers are pure functions that take a
snapshot and return a new one; EventStore holds the current snapshot for one
controller. Every copy of an event (list, selected, dashboard) is updated by
the same reducer so the copies cannot drift apart.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from venue_events.core.errors import ErrorCode
from venue_events.schemas.application import Application, Photographer
from venue_events.schemas.booking import Booking
from venue_events.schemas.event import Event, EventStatus
from venue_events.schemas.statistics import EventStatistics, EventsDashboard
from venue_events.services import statistics_service


@dataclass(frozen=True)
class EventState:
    events: tuple[Event, ...] = ()
    dashboard: Optional[EventsDashboard] = None
    selected_event: Optional[Event] = None
    applications: tuple[Application, ...] = ()
    bookings: tuple[Booking, ...] = ()
    statistics: Optional[EventStatistics] = None
    statistics_from_gateway: bool = False
    approved_photographers: tuple[Photographer, ...] = ()

    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    loading: bool = False
    refreshing: bool = False
    creating_event: bool = False
    updating_event: bool = False


class EventStore:
    """Holds the current snapshot. Only the owning controller calls `apply`."""

    def __init__(self, initial: Optional[EventState] = None):
        self._state = initial or EventState()

    @property
    def state(self) -> EventState:
        return self._state

    def apply(self, reducer: Callable[..., EventState], *args, **kwargs) -> EventState:
        self._state = reducer(self._state, *args, **kwargs)
        return self._state


# ---------------------------------------------------------------------------
# Status flags
# ---------------------------------------------------------------------------

def set_flags(state: EventState, **flags: bool) -> EventState:
    return replace(state, **flags)


def set_error(state: EventState, code: ErrorCode, message: str) -> EventState:
    return replace(state, error=message, error_code=code)


def clear_error(state: EventState) -> EventState:
    return replace(state, error=None, error_code=None)


def reset(state: EventState) -> EventState:
    """Empty every projection. In-flight flags stay with the commands that set them."""
    return EventState(
        loading=state.loading,
        refreshing=state.refreshing,
        creating_event=state.creating_event,
        updating_event=state.updating_event,
    )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def _map_dashboard(
    dashboard: Optional[EventsDashboard],
    now: datetime,
    transform: Callable[[int, tuple[Event, ...]], tuple[Event, ...]],
) -> Optional[EventsDashboard]:
    """Rebuild every location (and the summary) after transforming its events."""
    if dashboard is None:
        return None
    locations = []
    for loc in dashboard.locations:
        events = transform(loc.location_id, loc.events)
        if events is loc.events:
            locations.append(loc)
            continue
        summarized = statistics_service.summarize_location(loc.location_id, events, now)
        locations.append(summarized.model_copy(update={"location_name": loc.location_name}))
    return statistics_service.summarize_dashboard(locations)


def _replace_in(events: tuple[Event, ...], event_id: int, fn: Callable[[Event], Event]) -> tuple[Event, ...]:
    if not any(e.event_id == event_id for e in events):
        return events
    return tuple(fn(e) if e.event_id == event_id else e for e in events)


def _broadcast(state: EventState, event_id: int, fn: Callable[[Event], Event], now: datetime) -> EventState:
    selected = state.selected_event
    if selected is not None and selected.event_id == event_id:
        selected = fn(selected)
    return replace(
        state,
        events=_replace_in(state.events, event_id, fn),
        selected_event=selected,
        dashboard=_map_dashboard(
            state.dashboard, now, lambda _loc, events: _replace_in(events, event_id, fn)
        ),
    )


def set_events(state: EventState, events: list[Event]) -> EventState:
    return replace(state, events=tuple(events))


def set_dashboard(state: EventState, dashboard: EventsDashboard) -> EventState:
    all_events = tuple(e for loc in dashboard.locations for e in loc.events)
    return replace(state, dashboard=dashboard, events=all_events)


def select_event(state: EventState, event: Optional[Event]) -> EventState:
    return replace(state, selected_event=event)


def add_event(state: EventState, event: Event, now: datetime) -> EventState:
    def append(location_id: int, events: tuple[Event, ...]) -> tuple[Event, ...]:
        return events + (event,) if location_id == event.location_id else events

    return replace(
        state,
        events=state.events + (event,),
        dashboard=_map_dashboard(state.dashboard, now, append),
    )


def replace_event(state: EventState, event: Event, now: datetime) -> EventState:
    return _broadcast(state, event.event_id, lambda _old: event, now)


def patch_event_status(state: EventState, event_id: int, status: EventStatus, now: datetime) -> EventState:
    return _broadcast(state, event_id, lambda old: old.model_copy(update={"status": status}), now)


def patch_event_counters(state: EventState, event_id: int, counters: dict, now: datetime) -> EventState:
    return _broadcast(state, event_id, lambda old: old.model_copy(update=counters), now)


def remove_event(state: EventState, event_id: int, now: datetime) -> EventState:
    def drop(_location_id: int, events: tuple[Event, ...]) -> tuple[Event, ...]:
        if not any(e.event_id == event_id for e in events):
            return events
        return tuple(e for e in events if e.event_id != event_id)

    selected = state.selected_event
    if selected is not None and selected.event_id == event_id:
        selected = None
    return replace(
        state,
        events=tuple(e for e in state.events if e.event_id != event_id),
        selected_event=selected,
        dashboard=_map_dashboard(state.dashboard, now, drop),
    )


# ---------------------------------------------------------------------------
# Applications, bookings, statistics
# ---------------------------------------------------------------------------

def set_applications(state: EventState, applications: list[Application]) -> EventState:
    return replace(state, applications=tuple(applications))


def replace_application(state: EventState, application: Application) -> EventState:
    """Swap the matching entry in place; list order is preserved."""
    return replace(
        state,
        applications=tuple(
            application if existing.key == application.key else existing
            for existing in state.applications
        ),
    )


def set_bookings(state: EventState, bookings: list[Booking]) -> EventState:
    return replace(state, bookings=tuple(bookings))


def set_approved_photographers(state: EventState, photographers: list[Photographer]) -> EventState:
    return replace(state, approved_photographers=tuple(photographers))


def set_statistics(
    state: EventState,
    statistics: Optional[EventStatistics],
    from_gateway: bool,
) -> EventState:
    return replace(state, statistics=statistics, statistics_from_gateway=from_gateway)
