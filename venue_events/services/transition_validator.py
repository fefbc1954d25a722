"""
Event status transition rules.

STATE MACHINE
=============

  Draft ──► Open ──► Active ──► Closed
    ▲        │ ▲        │          │
    │        ▼ │        ▼          │
    └───── Cancelled ◄──┘    (reopen to Active)

Legal moves (source -> targets, with the facts each one needs):

  Draft      -> Open
  Open       -> Draft, Active (approved photographer), Cancelled
  Active     -> Closed (event ended), Cancelled
  Closed     -> Active
  Cancelled  -> Draft, Open

On top of the table:
  - entering Open needs a name of at least 3 characters
  - entering Active needs at least one approved photographer, whatever the source
  - "changing" to the current status is always allowed and does nothing

Everything here is a pure function of (current, target, snapshot). Surfacing
warnings and calling the API is the controller's job.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from venue_events.schemas.common import as_utc
from venue_events.schemas.event import Event, EventStatus

MIN_EVENT_NAME_LENGTH = 3

ILLEGAL_TRANSITION = "illegal direct transition"
NEED_VALID_NAME = "need a valid event name"
NEED_APPROVED_PHOTOGRAPHER = "need at least one approved photographer"
NEED_EVENT_ENDED = "event has not ended yet"

TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.DRAFT: frozenset({EventStatus.OPEN}),
    EventStatus.OPEN: frozenset({EventStatus.DRAFT, EventStatus.ACTIVE, EventStatus.CANCELLED}),
    EventStatus.ACTIVE: frozenset({EventStatus.CLOSED, EventStatus.CANCELLED}),
    EventStatus.CLOSED: frozenset({EventStatus.ACTIVE}),
    EventStatus.CANCELLED: frozenset({EventStatus.DRAFT, EventStatus.OPEN}),
}

_WARNINGS: dict[EventStatus, tuple[str, ...]] = {
    EventStatus.ACTIVE: (
        "Customers will be able to book",
        "Editing event details will be restricted",
    ),
    EventStatus.CLOSED: ("No new applications or bookings will be accepted",),
    EventStatus.CANCELLED: (
        "All applications and bookings will be voided",
        "Customers may need to be refunded",
        "Everyone involved will be notified",
    ),
}


@dataclass(frozen=True)
class EventSnapshot:
    """The facts about an event that transition rules depend on."""

    name: str
    approved_photographers_count: int = 0
    total_bookings_count: int = 0
    event_started: bool = False
    event_ended: bool = False

    @property
    def has_approved_photographers(self) -> bool:
        return self.approved_photographers_count > 0

    @property
    def has_bookings(self) -> bool:
        return self.total_bookings_count > 0

    @classmethod
    def from_event(cls, event: Event, now: datetime) -> "EventSnapshot":
        now = as_utc(now)
        return cls(
            name=event.name or "",
            approved_photographers_count=event.approved_photographers_count,
            total_bookings_count=event.total_bookings_count,
            event_started=now >= as_utc(event.start_date),
            event_ended=now > as_utc(event.end_date),
        )


@dataclass(frozen=True)
class TransitionCheck:
    ok: bool
    reason: Optional[str] = None


def can_transition(
    current: EventStatus,
    target: EventStatus,
    snapshot: EventSnapshot,
) -> TransitionCheck:
    """Decide whether an event may move from `current` to `target`."""
    if target == current:
        return TransitionCheck(ok=True)

    if target not in TRANSITIONS.get(current, frozenset()):
        return TransitionCheck(ok=False, reason=ILLEGAL_TRANSITION)

    if current == EventStatus.OPEN and target == EventStatus.ACTIVE:
        if not snapshot.has_approved_photographers:
            return TransitionCheck(ok=False, reason=NEED_APPROVED_PHOTOGRAPHER)

    if current == EventStatus.ACTIVE and target == EventStatus.CLOSED:
        if not snapshot.event_ended:
            return TransitionCheck(ok=False, reason=NEED_EVENT_ENDED)

    if target == EventStatus.OPEN and len(snapshot.name.strip()) < MIN_EVENT_NAME_LENGTH:
        return TransitionCheck(ok=False, reason=NEED_VALID_NAME)

    if target == EventStatus.ACTIVE and snapshot.approved_photographers_count <= 0:
        return TransitionCheck(ok=False, reason=NEED_APPROVED_PHOTOGRAPHER)

    return TransitionCheck(ok=True)


def allowed_transitions(current: EventStatus, snapshot: EventSnapshot) -> frozenset[EventStatus]:
    """Targets reachable from `current` right now. Never contains `current`."""
    return frozenset(
        target
        for target in TRANSITIONS.get(current, frozenset())
        if can_transition(current, target, snapshot).ok
    )


def is_destructive(target: EventStatus) -> bool:
    return target == EventStatus.CANCELLED


def transition_warnings(current: EventStatus, target: EventStatus) -> tuple[str, ...]:
    """User-facing consequences of a status change, shown before confirming it."""
    if target == current:
        return ()
    if target == EventStatus.OPEN:
        if current == EventStatus.DRAFT:
            return ()
        return ("Photographers who already applied may be affected",)
    return _WARNINGS.get(target, ())
