"""
In-memory stand-in for the /api/LocationEvent service.

Behaves like the real API where the client cares: empty lists answer 404,
status changes take a bare JSON string, responses can be wrapped in a
{"data": ...} envelope, and any (method, path) can be forced to fail.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Body, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse


@dataclass
class RecordedRequest:
    method: str
    path: str
    authorization: Optional[str]


@dataclass
class FakeApiState:
    events: dict[int, dict] = field(default_factory=dict)
    applications: dict[int, list[dict]] = field(default_factory=dict)
    bookings: dict[int, list[dict]] = field(default_factory=dict)
    statistics: dict[int, dict] = field(default_factory=dict)
    approved_photographers: dict[int, list[dict]] = field(default_factory=dict)
    failures: dict[tuple[str, str], tuple[int, Any]] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)
    bodies: list[Any] = field(default_factory=list)
    envelope: bool = False
    next_event_id: int = 100

    def add_event(self, payload: dict) -> dict:
        self.events[payload["eventId"]] = dict(payload)
        return payload

    def fail(self, method: str, path: str, status_code: int, body: Any = None) -> None:
        self.failures[(method, path)] = (status_code, body)

    def calls(self, method: str, path: str) -> list[RecordedRequest]:
        return [r for r in self.requests if r.method == method and r.path == path]


def create_fake_api(state: FakeApiState) -> FastAPI:
    app = FastAPI()
    router = APIRouter(prefix="/api/LocationEvent")

    def wrap(data: Any) -> Any:
        if state.envelope:
            return {"error": 0, "message": "Success", "data": data}
        return data

    @app.middleware("http")
    async def record_and_inject_failures(request: Request, call_next):
        state.requests.append(
            RecordedRequest(request.method, request.url.path, request.headers.get("authorization"))
        )
        failure = state.failures.get((request.method, request.url.path))
        if failure is not None:
            status_code, body = failure
            if body is None or isinstance(body, str):
                return PlainTextResponse(body or "", status_code=status_code)
            return JSONResponse(body, status_code=status_code)
        return await call_next(request)

    @router.get("/location/{location_id}")
    async def list_events(location_id: int):
        events = [e for e in state.events.values() if e["locationId"] == location_id]
        if not events:
            raise HTTPException(status_code=404, detail="No events found")
        return wrap(events)

    @router.get("/{event_id}/detail")
    async def get_event(event_id: int):
        if event_id not in state.events:
            raise HTTPException(status_code=404, detail="Event not found")
        return wrap(state.events[event_id])

    @router.post("", status_code=201)
    async def create_event(body: dict = Body(...)):
        state.bodies.append(body)
        event_id = state.next_event_id
        state.next_event_id += 1
        now = datetime.now(timezone.utc).isoformat()
        event = {
            **body,
            "eventId": event_id,
            "status": "Draft",
            "createdAt": now,
            "updatedAt": now,
            "approvedPhotographersCount": 0,
            "totalBookingsCount": 0,
            "totalApplicationsCount": 0,
        }
        state.events[event_id] = event
        return wrap(event)

    @router.put("/{event_id}")
    async def update_event(event_id: int, body: dict = Body(...)):
        state.bodies.append(body)
        if event_id not in state.events:
            raise HTTPException(status_code=404, detail="Event not found")
        state.events[event_id] = {**state.events[event_id], **body}
        return wrap(state.events[event_id])

    @router.patch("/{event_id}/status", status_code=204)
    async def update_status(event_id: int, status: str = Body(...)):
        state.bodies.append(status)
        if event_id not in state.events:
            raise HTTPException(status_code=404, detail="Event not found")
        state.events[event_id]["status"] = status
        return Response(status_code=204)

    @router.delete("/{event_id}", status_code=204)
    async def delete_event(event_id: int):
        if state.events.pop(event_id, None) is None:
            raise HTTPException(status_code=404, detail="Event not found")
        return Response(status_code=204)

    @router.get("/{event_id}/applications")
    async def list_applications(event_id: int):
        applications = state.applications.get(event_id)
        if not applications:
            raise HTTPException(status_code=404, detail="No applications found")
        return wrap(applications)

    @router.post("/respond-application")
    async def respond_application(body: dict = Body(...)):
        state.bodies.append(body)
        for application in state.applications.get(body["eventId"], []):
            if application["photographerId"] == body["photographerId"]:
                application["status"] = body["status"]
                application["rejectionReason"] = body.get("rejectionReason")
                application["respondedAt"] = datetime.now(timezone.utc).isoformat()
                return {"message": "Application updated"}
        raise HTTPException(status_code=404, detail="Application not found")

    @router.get("/{event_id}/bookings")
    async def list_bookings(event_id: int):
        bookings = state.bookings.get(event_id)
        if not bookings:
            raise HTTPException(status_code=404, detail="No bookings found")
        return wrap(bookings)

    @router.get("/{event_id}/statistics")
    async def get_statistics(event_id: int):
        if event_id not in state.statistics:
            raise HTTPException(status_code=404, detail="Statistics not found")
        return wrap(state.statistics[event_id])

    @router.get("/{event_id}/approved-photographers")
    async def list_approved_photographers(event_id: int):
        photographers = state.approved_photographers.get(event_id)
        if not photographers:
            raise HTTPException(status_code=404, detail="No approved photographers")
        return wrap(photographers)

    app.include_router(router)
    return app
