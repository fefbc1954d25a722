"""
Event lifecycle controller: the single place where local event state changes.

FLOW
====

  caller -> command -> local rules (transition validator / application workflow)
                    -> gateway call
                    -> reducers update every projection that holds the entity

Validation failures never reach the network. Gateway failures leave the
projections exactly as they were. Either way the command returns a
CommandResult and the message lands in the single `error` slot (last error
wins); nothing is raised to the caller.

CONCURRENCY
===========

Commands run on one asyncio loop and only suspend while awaiting the gateway.
There are no locks. Two guards exist:

  - creating_event / updating_event flags stop the same command from being
    re-entered while it is in flight (a different command can still race it)
  - every gateway call takes a request token for its entity key; a response
    whose token is no longer the newest for that key is discarded, so the
    latest request wins rather than the latest response
"""

import asyncio
import inspect
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import ValidationError

from venue_events.core.config import Settings, get_settings
from venue_events.core.errors import (
    ApplicationNotFoundError,
    CommandResult,
    DomainError,
    ErrorCode,
    EventNotFoundError,
    GatewayError,
    IllegalTransitionError,
    InvalidEventRequestError,
    OperationInProgressError,
)
from venue_events.core.logging import get_logger
from venue_events.core.metrics import (
    record_application_response,
    record_stale_response,
    record_status_transition,
)
from venue_events.schemas.application import Application, ApplicationStatus, Photographer
from venue_events.schemas.booking import Booking
from venue_events.schemas.common import as_utc
from venue_events.schemas.event import (
    CreateEventRequest,
    Event,
    EventFilters,
    EventStatus,
    UpdateEventRequest,
)
from venue_events.schemas.statistics import EventStatistics, EventsDashboard
from venue_events.services import application_workflow, projections, statistics_service
from venue_events.services.interfaces.gateway import EventGateway
from venue_events.services.projections import EventState, EventStore
from venue_events.services.transition_validator import (
    EventSnapshot,
    can_transition,
    is_destructive,
    transition_warnings,
)

logger = get_logger(__name__)

ConfirmCallback = Callable[[tuple[str, ...]], Union[bool, Awaitable[bool]]]


class StaleResponse(Exception):
    """A gateway response arrived after a newer request for the same entity."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validation_message(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item.get("loc", ()))
        parts.append(f"{field}: {item['msg']}" if field else item["msg"])
    return "; ".join(parts) or "Invalid request"


class EventLifecycleController:
    """Commands and queries over one venue owner's events."""

    def __init__(
        self,
        gateway: EventGateway,
        store: Optional[EventStore] = None,
        clock: Callable[[], datetime] = _utcnow,
        settings: Optional[Settings] = None,
    ):
        self.gateway = gateway
        self.store = store or EventStore()
        self.clock = clock
        self.settings = settings or get_settings()
        self._request_tokens: dict[tuple, int] = {}
        self._pending = 0

    @property
    def state(self) -> EventState:
        return self.store.state

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _begin(self, guard: Optional[str]) -> None:
        self._pending += 1
        flags = {"loading": True}
        if guard:
            flags[guard] = True
        self.store.apply(projections.set_flags, **flags)

    def _end(self, guard: Optional[str]) -> None:
        self._pending -= 1
        flags = {"loading": self._pending > 0}
        if guard:
            flags[guard] = False
        self.store.apply(projections.set_flags, **flags)

    async def _run(
        self,
        operation: str,
        command: Callable[[], Awaitable[CommandResult]],
        guard: Optional[str] = None,
    ) -> CommandResult:
        if guard is not None and getattr(self.state, guard):
            logger.warning("operation_in_progress", operation=operation)
            return CommandResult.from_error(OperationInProgressError(operation))

        self.store.apply(projections.clear_error)
        self._begin(guard)
        try:
            return await command()
        except StaleResponse:
            return CommandResult.failure(
                ErrorCode.SUPERSEDED, f"{operation} was superseded by a newer request"
            )
        except DomainError as e:
            logger.warning("operation_failed", operation=operation, code=e.code.value, error=e.message)
            self.store.apply(projections.set_error, e.code, e.message)
            return CommandResult.from_error(e)
        finally:
            self._end(guard)

    def _issue_token(self, key: tuple) -> int:
        token = self._request_tokens.get(key, 0) + 1
        self._request_tokens[key] = token
        return token

    async def _call(self, operation: str, key: tuple, call: Awaitable[Any]) -> Any:
        """Await a gateway call, discarding the outcome if a newer request was issued meanwhile."""
        token = self._issue_token(key)
        try:
            value = await call
        except GatewayError:
            if self._request_tokens.get(key) == token:
                raise
            value = None
        if self._request_tokens.get(key) != token:
            logger.info("stale_response_ignored", operation=operation, key=list(key))
            record_stale_response(operation)
            raise StaleResponse(operation)
        return value

    def _validate_create(self, request: Union[CreateEventRequest, dict]) -> CreateEventRequest:
        if not isinstance(request, CreateEventRequest):
            try:
                request = CreateEventRequest.model_validate(request)
            except ValidationError as e:
                raise InvalidEventRequestError(_validation_message(e)) from e

        grace = timedelta(seconds=self.settings.EVENT_START_GRACE_SECONDS)
        if as_utc(request.start_date) < as_utc(self.clock()) - grace:
            raise InvalidEventRequestError("startDate cannot be in the past")
        return request

    @staticmethod
    def _validate_update(patch: Union[UpdateEventRequest, dict]) -> UpdateEventRequest:
        if isinstance(patch, UpdateEventRequest):
            return patch
        try:
            return UpdateEventRequest.model_validate(patch)
        except ValidationError as e:
            raise InvalidEventRequestError(_validation_message(e)) from e

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_event(self, event_id: int) -> Optional[Event]:
        """Locally known copy of an event, from any projection."""
        state = self.state
        if state.selected_event is not None and state.selected_event.event_id == event_id:
            return state.selected_event
        for event in state.events:
            if event.event_id == event_id:
                return event
        if state.dashboard is not None:
            for loc in state.dashboard.locations:
                for event in loc.events:
                    if event.event_id == event_id:
                        return event
        return None

    def find_application(self, event_id: int, photographer_id: int) -> Optional[Application]:
        for application in self.state.applications:
            if application.key == (event_id, photographer_id):
                return application
        return None

    def filter_events(self, filters: Optional[EventFilters] = None) -> list[Event]:
        """Loaded events matching every criterion that is set."""
        filters = filters or EventFilters()
        term = (filters.search_term or "").strip().lower()

        def matches(event: Event) -> bool:
            if filters.location_id is not None and event.location_id != filters.location_id:
                return False
            if filters.status is not None and event.status != filters.status:
                return False
            if term:
                in_name = term in event.name.lower()
                in_description = term in (event.description or "").lower()
                if not in_name and not in_description:
                    return False
            if filters.start_date is not None and as_utc(event.start_date) < as_utc(filters.start_date):
                return False
            if filters.end_date is not None and as_utc(event.end_date) > as_utc(filters.end_date):
                return False
            return True

        return [event for event in self.state.events if matches(event)]

    # ------------------------------------------------------------------
    # Event commands
    # ------------------------------------------------------------------

    async def load_events(self, location_id: int) -> CommandResult[list[Event]]:
        """Replace the event list with the events of one location."""

        async def command():
            events = await self._call(
                "load_events", ("events",), self.gateway.list_events(location_id)
            )
            self.store.apply(projections.set_events, events)
            logger.info("events_loaded", location_id=location_id, count=len(events))
            return CommandResult.success(events)

        return await self._run("load_events", command)

    async def _location_events(self, location_id: int) -> list[Event]:
        try:
            return await self.gateway.list_events(location_id)
        except GatewayError as e:
            logger.warning("location_events_failed", location_id=location_id, error=e.message)
            return []

    async def load_dashboard(self, location_ids: list[int]) -> CommandResult[EventsDashboard]:
        """
        Load every location concurrently and roll them up.
        A location that fails to load shows up empty instead of failing the dashboard.
        """

        async def command():
            per_location = await self._call(
                "load_dashboard",
                ("events",),
                asyncio.gather(*(self._location_events(lid) for lid in location_ids)),
            )
            now = self.clock()
            dashboard = statistics_service.summarize_dashboard([
                statistics_service.summarize_location(lid, events, now)
                for lid, events in zip(location_ids, per_location)
            ])
            self.store.apply(projections.set_dashboard, dashboard)
            logger.info(
                "dashboard_loaded",
                locations=len(location_ids),
                total_events=dashboard.summary.total_events,
            )
            return CommandResult.success(dashboard)

        return await self._run("load_dashboard", command)

    async def load_event(self, event_id: int) -> CommandResult[Optional[Event]]:
        """Fetch event detail into selected_event (None if the API has no such event)."""

        async def command():
            event = await self._call("load_event", ("selected",), self.gateway.get_event(event_id))
            self.store.apply(projections.select_event, event)
            return CommandResult.success(event)

        return await self._run("load_event", command)

    async def create_event(self, request: Union[CreateEventRequest, dict]) -> CommandResult[Event]:
        async def command():
            valid = self._validate_create(request)
            event = await self._call("create_event", ("create",), self.gateway.create_event(valid))
            self.store.apply(projections.add_event, event, self.clock())
            logger.info("event_created", event_id=event.event_id, location_id=event.location_id)
            return CommandResult.success(event)

        return await self._run("create_event", command, guard="creating_event")

    async def update_event(
        self,
        event_id: int,
        patch: Union[UpdateEventRequest, dict],
    ) -> CommandResult[Event]:
        async def command():
            valid = self._validate_update(patch)
            event = await self._call(
                "update_event", ("event", event_id), self.gateway.update_event(event_id, valid)
            )
            self.store.apply(projections.replace_event, event, self.clock())
            logger.info("event_updated", event_id=event_id)
            return CommandResult.success(event)

        return await self._run("update_event", command, guard="updating_event")

    async def change_status(
        self,
        event_id: int,
        new_status: Union[EventStatus, str],
        confirm: Optional[ConfirmCallback] = None,
    ) -> CommandResult[Event]:
        """
        Move an event to `new_status`.

        The transition is checked against the locally known event before any
        network call. When the change has consequences (cancelling, going
        live, closing) the warnings are passed to `confirm`; a falsy answer
        aborts the change.
        """

        async def command():
            try:
                target = EventStatus(new_status)
            except ValueError:
                raise InvalidEventRequestError(f"Unknown event status: {new_status}")

            event = self.find_event(event_id)
            if event is None:
                raise EventNotFoundError(event_id)

            if target == event.status:
                record_status_transition(target.value, "noop")
                return CommandResult.success(event)

            check = can_transition(event.status, target, EventSnapshot.from_event(event, self.clock()))
            if not check.ok:
                record_status_transition(target.value, "rejected")
                raise IllegalTransitionError(event.status.value, target.value, check.reason)

            warnings = transition_warnings(event.status, target)
            if is_destructive(target):
                logger.warning(
                    "destructive_status_change",
                    event_id=event_id,
                    from_status=event.status.value,
                    to_status=target.value,
                    warnings=list(warnings),
                )
            if confirm is not None and warnings:
                answer = confirm(warnings)
                if inspect.isawaitable(answer):
                    answer = await answer
                if not answer:
                    record_status_transition(target.value, "aborted")
                    logger.info("status_change_aborted", event_id=event_id, to_status=target.value)
                    return CommandResult.failure(ErrorCode.ABORTED, "Status change was not confirmed")

            try:
                await self._call(
                    "change_status",
                    ("event", event_id),
                    self.gateway.update_event_status(event_id, target),
                )
            except GatewayError:
                record_status_transition(target.value, "error")
                raise

            self.store.apply(projections.patch_event_status, event_id, target, self.clock())
            record_status_transition(target.value, "changed")
            logger.info(
                "event_status_changed",
                event_id=event_id,
                from_status=event.status.value,
                to_status=target.value,
            )
            return CommandResult.success(self.find_event(event_id))

        return await self._run("change_status", command)

    async def delete_event(self, event_id: int) -> CommandResult[None]:
        """Delete remotely, then drop the event from every projection.
        Loaded applications and bookings are left as they are."""

        async def command():
            await self._call("delete_event", ("event", event_id), self.gateway.delete_event(event_id))
            self.store.apply(projections.remove_event, event_id, self.clock())
            logger.info("event_deleted", event_id=event_id)
            return CommandResult.success()

        return await self._run("delete_event", command)

    async def refresh_events(
        self,
        location_id: Optional[int] = None,
        location_ids: Optional[list[int]] = None,
    ) -> CommandResult:
        """Pull-to-refresh: reload the dashboard or a single location wholesale."""
        self.store.apply(projections.set_flags, refreshing=True)
        try:
            if location_ids:
                return await self.load_dashboard(location_ids)
            if location_id is not None:
                return await self.load_events(location_id)
            return CommandResult.success()
        finally:
            self.store.apply(projections.set_flags, refreshing=False)

    # ------------------------------------------------------------------
    # Applications, bookings, statistics
    # ------------------------------------------------------------------

    def _refresh_counters(self, event_id: int, counters: dict) -> None:
        if self.find_event(event_id) is not None:
            self.store.apply(projections.patch_event_counters, event_id, counters, self.clock())

    def _refresh_statistics(self, event_id: int, after_mutation: bool = False) -> None:
        """
        Keep statistics in step with the loaded applications and bookings.

        Statistics fetched from the gateway win over a local recompute; after
        a local application change only their application counts are refreshed.
        """
        state = self.state
        applications = [a for a in state.applications if a.event_id == event_id]
        bookings = [b for b in state.bookings if b.event_id == event_id]
        current = state.statistics

        if state.statistics_from_gateway and current is not None and current.event_id == event_id:
            if after_mutation:
                updated = statistics_service.with_application_counts(current, applications)
                self.store.apply(projections.set_statistics, updated, True)
            return

        local = statistics_service.recompute(applications, bookings, self.find_event(event_id))
        self.store.apply(projections.set_statistics, local, False)

    async def load_applications(self, event_id: int) -> CommandResult[list[Application]]:
        async def command():
            applications = await self._call(
                "load_applications", ("applications",), self.gateway.list_applications(event_id)
            )
            self.store.apply(projections.set_applications, applications)
            self._refresh_counters(event_id, statistics_service.application_counters(applications))
            self._refresh_statistics(event_id)
            logger.info("applications_loaded", event_id=event_id, count=len(applications))
            return CommandResult.success(applications)

        return await self._run("load_applications", command)

    async def load_bookings(self, event_id: int) -> CommandResult[list[Booking]]:
        async def command():
            bookings = await self._call(
                "load_bookings", ("bookings",), self.gateway.list_bookings(event_id)
            )
            self.store.apply(projections.set_bookings, bookings)
            self._refresh_counters(event_id, statistics_service.booking_counters(bookings))
            self._refresh_statistics(event_id)
            logger.info("bookings_loaded", event_id=event_id, count=len(bookings))
            return CommandResult.success(bookings)

        return await self._run("load_bookings", command)

    async def load_approved_photographers(self, event_id: int) -> CommandResult[list[Photographer]]:
        async def command():
            photographers = await self._call(
                "load_approved_photographers",
                ("approved_photographers",),
                self.gateway.list_approved_photographers(event_id),
            )
            self.store.apply(projections.set_approved_photographers, photographers)
            return CommandResult.success(photographers)

        return await self._run("load_approved_photographers", command)

    async def load_statistics(self, event_id: int) -> CommandResult[EventStatistics]:
        """Server statistics when it has them, otherwise a local recompute."""

        async def command():
            remote = await self._call(
                "load_statistics", ("statistics",), self.gateway.get_statistics(event_id)
            )
            if remote is None:
                self.store.apply(projections.set_statistics, None, False)
                self._refresh_statistics(event_id)
            else:
                if remote.event_id is None:
                    remote = remote.model_copy(update={"event_id": event_id})
                self.store.apply(projections.set_statistics, remote, True)
            return CommandResult.success(self.state.statistics)

        return await self._run("load_statistics", command)

    async def respond_to_application(
        self,
        event_id: int,
        photographer_id: int,
        status: Union[ApplicationStatus, str],
        rejection_reason: Optional[str] = None,
    ) -> CommandResult[Application]:
        """
        Approve or reject a loaded application.

        The entry is updated where it sits in `applications`; the owning
        event's counters and the statistics follow.
        """

        async def command():
            try:
                decision = ApplicationStatus(status)
            except ValueError:
                raise InvalidEventRequestError(f"Unknown application status: {status}")

            application = self.find_application(event_id, photographer_id)
            if application is None:
                raise ApplicationNotFoundError(event_id, photographer_id)

            try:
                application_workflow.validate_response(application, decision, rejection_reason)
            except DomainError:
                record_application_response(decision.value, "rejected")
                raise

            updated = application_workflow.respond(
                application, decision, rejection_reason, now=self.clock()
            )
            try:
                await self._call(
                    "respond_to_application",
                    ("application", event_id, photographer_id),
                    self.gateway.respond_to_application(
                        event_id, photographer_id, decision, updated.rejection_reason
                    ),
                )
            except GatewayError:
                record_application_response(decision.value, "error")
                raise

            self.store.apply(projections.replace_application, updated)
            applications = [a for a in self.state.applications if a.event_id == event_id]
            self._refresh_counters(event_id, statistics_service.application_counters(applications))
            self._refresh_statistics(event_id, after_mutation=True)

            record_application_response(decision.value, "sent")
            logger.info(
                "application_responded",
                event_id=event_id,
                photographer_id=photographer_id,
                status=decision.value,
            )
            return CommandResult.success(updated)

        return await self._run("respond_to_application", command)

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def select_event(self, event: Optional[Event]) -> None:
        self.store.apply(projections.select_event, event)

    def clear_error(self) -> None:
        self.store.apply(projections.clear_error)

    def clear_all(self) -> None:
        """
        Drop every projection (e.g. on logout). In-flight responses are
        discarded; their commands still own the in-flight flags until they return.
        """
        for key in self._request_tokens:
            self._request_tokens[key] += 1
        self.store.apply(projections.reset)
