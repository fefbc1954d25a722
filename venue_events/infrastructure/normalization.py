"""
Map the shapes the API actually returns onto the canonical schemas.

The server is inconsistent: photographer details on an application come either
flat (photographerName, photographerRating, ...) or nested under
"photographer"; booking parties come nested or flat; status strings vary in
case. All of that is resolved here, so lifecycle code only ever sees one shape.
"""

from typing import Any, Optional, TypeVar

from venue_events.schemas.application import Application, ApplicationStatus, Photographer
from venue_events.schemas.booking import Booking, BookingParty, BookingStatus
from venue_events.schemas.event import Event, EventStatus
from venue_events.schemas.statistics import EventStatistics

E = TypeVar("E", EventStatus, ApplicationStatus, BookingStatus)

_PHOTOGRAPHER_FIELDS = (
    "profileImage", "rating", "ratingCount", "yearsExperience", "hourlyRate", "phoneNumber",
)
_PARTY_FIELDS = ("profileImage", "phoneNumber")

# Only an owner's answer carries respondedAt
_ANSWERED = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED})


def unwrap(payload: Any) -> Any:
    """Strip a {"data": ...} envelope if present."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def as_list(payload: Any, allow_single: bool = False) -> list:
    """Accept a bare array or an enveloped one; optionally a lone object."""
    payload = unwrap(payload)
    if isinstance(payload, list):
        return payload
    if allow_single and isinstance(payload, dict):
        return [payload]
    return []


def parse_status(value: Any, enum: type[E], default: E) -> E:
    if value is None:
        return default
    if isinstance(value, enum):
        return value
    wanted = str(value).strip().lower()
    for member in enum:
        if member.value.lower() == wanted:
            return member
    raise ValueError(f"Unknown {enum.__name__}: {value!r}")


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _pick(flat: dict, nested: dict, prefix: str, field: str) -> Any:
    flat_key = prefix + field[0].upper() + field[1:]
    return _first(flat.get(flat_key), nested.get(field))


def normalize_event(raw: dict) -> Event:
    data = dict(raw)
    data["status"] = parse_status(data.get("status"), EventStatus, EventStatus.DRAFT)
    for counter in (
        "approvedPhotographersCount",
        "totalBookingsCount",
        "totalApplicationsCount",
        "pendingApplicationsCount",
    ):
        if data.get(counter) is None:
            data.pop(counter, None)
    if data.get("images") is None:
        data.pop("images", None)
    return Event.model_validate(data)


def normalize_photographer(raw: dict, photographer_id: Optional[int] = None) -> Photographer:
    """Accepts either a photographer object or an application/booking row with flat fields."""
    nested = raw.get("photographer") or {}
    if "fullName" in raw and "photographerId" in raw and not nested:
        nested = raw

    pid = _first(photographer_id, raw.get("photographerId"), nested.get("photographerId"))
    data = {
        "photographerId": pid,
        "userId": _first(raw.get("photographerUserId"), nested.get("userId")),
        "fullName": _first(
            raw.get("photographerName"),
            nested.get("fullName"),
            f"Photographer #{pid}",
        ),
    }
    for field in _PHOTOGRAPHER_FIELDS:
        data[field] = _pick(raw, nested, "photographer", field)
    return Photographer.model_validate(data)


def normalize_application(raw: dict) -> Application:
    status = parse_status(raw.get("status"), ApplicationStatus, ApplicationStatus.APPLIED)
    return Application.model_validate({
        "eventId": raw.get("eventId"),
        "photographerId": raw.get("photographerId"),
        "specialRate": raw.get("specialRate"),
        "status": status,
        "appliedAt": raw.get("appliedAt"),
        "respondedAt": raw.get("respondedAt") if status in _ANSWERED else None,
        "rejectionReason": raw.get("rejectionReason") if status == ApplicationStatus.REJECTED else None,
        "photographer": normalize_photographer(raw),
    })


def _normalize_party(raw: dict, prefix: str, party_id: Any, fallback_name: str) -> BookingParty:
    nested = raw.get(prefix) or {}
    data = {
        "id": _first(party_id, nested.get("userId"), nested.get("photographerId"), nested.get("id")),
        "fullName": _first(
            raw.get(prefix + "Name"),
            raw.get(prefix + "FullName"),
            nested.get("fullName"),
            fallback_name,
        ),
    }
    for field in _PARTY_FIELDS:
        data[field] = _pick(raw, nested, prefix, field)
    return BookingParty.model_validate(data)


def normalize_booking(raw: dict) -> Booking:
    customer_id = raw.get("userId")
    photographer_id = _first(raw.get("photographerId"), raw.get("eventPhotographerId"))
    return Booking.model_validate({
        "eventBookingId": raw.get("eventBookingId"),
        "eventId": raw.get("eventId"),
        "eventPhotographerId": raw.get("eventPhotographerId"),
        "userId": customer_id,
        "startDatetime": raw.get("startDatetime"),
        "endDatetime": raw.get("endDatetime"),
        "status": parse_status(raw.get("status"), BookingStatus, BookingStatus.PENDING),
        "totalAmount": raw.get("totalAmount") or 0,
        "specialRequests": raw.get("specialRequests"),
        "createdAt": raw.get("createdAt"),
        "updatedAt": raw.get("updatedAt"),
        "customer": _normalize_party(raw, "customer", customer_id, "Customer"),
        "photographer": _normalize_party(raw, "photographer", photographer_id, "Photographer"),
    })


def normalize_statistics(raw: dict) -> EventStatistics:
    data = {key: value for key, value in raw.items() if value is not None}
    if "eventStatus" in data:
        data["eventStatus"] = parse_status(data["eventStatus"], EventStatus, EventStatus.DRAFT)
    return EventStatistics.model_validate(data)
