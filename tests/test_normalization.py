"""
Tests for mapping raw API payloads onto the canonical schemas.
"""

from decimal import Decimal

import pytest

from tests.factories import application_payload, booking_payload, event_payload
from venue_events.infrastructure import normalization
from venue_events.schemas.application import ApplicationStatus
from venue_events.schemas.booking import BookingStatus
from venue_events.schemas.event import EventStatus


def test_unwrap_envelope():
    assert normalization.unwrap({"error": 0, "data": [1, 2]}) == [1, 2]
    assert normalization.unwrap([1, 2]) == [1, 2]
    assert normalization.unwrap({"eventId": 1}) == {"eventId": 1}


def test_as_list_shapes():
    assert normalization.as_list({"data": [{"a": 1}]}) == [{"a": 1}]
    assert normalization.as_list({"a": 1}) == []
    assert normalization.as_list({"a": 1}, allow_single=True) == [{"a": 1}]
    assert normalization.as_list(None) == []


def test_parse_status_is_case_insensitive():
    assert normalization.parse_status("open", EventStatus, EventStatus.DRAFT) == EventStatus.OPEN
    assert normalization.parse_status(" CANCELLED ", EventStatus, EventStatus.DRAFT) == EventStatus.CANCELLED
    assert normalization.parse_status(None, EventStatus, EventStatus.DRAFT) == EventStatus.DRAFT


def test_parse_status_rejects_unknown_values():
    with pytest.raises(ValueError):
        normalization.parse_status("Archived", EventStatus, EventStatus.DRAFT)


def test_normalize_event_fills_missing_counters():
    event = normalization.normalize_event(
        event_payload(status="active", approvedPhotographersCount=None, images=None)
    )
    assert event.status == EventStatus.ACTIVE
    assert event.approved_photographers_count == 0
    assert event.images == ()
    assert event.location.name == "Rose Garden"
    assert event.discounted_price == Decimal("400000")


def test_normalize_application_flat_photographer():
    application = normalization.normalize_application(application_payload())
    assert application.photographer.photographer_id == 7
    assert application.photographer.full_name == "Photographer 7"
    assert application.photographer.rating == 4.8
    assert application.photographer.years_experience == 6
    assert application.special_rate == Decimal("300000")


def test_normalize_application_nested_photographer():
    raw = application_payload(
        photographerName=None,
        photographerRating=None,
        photographer={"photographerId": 7, "fullName": "Linh Tran", "rating": 4.2, "phoneNumber": "0900"},
    )
    application = normalization.normalize_application(raw)
    assert application.photographer.full_name == "Linh Tran"
    assert application.photographer.rating == 4.2
    assert application.photographer.phone_number == "0900"


def test_normalize_application_name_fallback():
    application = normalization.normalize_application(
        application_payload(photographer_id=12, photographerName=None)
    )
    assert application.photographer.full_name == "Photographer #12"


def test_rejection_reason_kept_only_for_rejected():
    applied = normalization.normalize_application(application_payload(rejectionReason="stale"))
    rejected = normalization.normalize_application(
        application_payload(status="rejected", rejectionReason="No portfolio")
    )
    assert applied.rejection_reason is None
    assert rejected.status == ApplicationStatus.REJECTED
    assert rejected.rejection_reason == "No portfolio"


@pytest.mark.parametrize("status,kept", [
    ("Applied", False),
    ("Withdrawn", False),
    ("Approved", True),
    ("Rejected", True),
])
def test_responded_at_only_for_answered_applications(status, kept):
    responded_at = "2026-10-18T12:00:00+00:00"
    application = normalization.normalize_application(
        application_payload(status=status, respondedAt=responded_at, rejectionReason="No portfolio")
    )
    assert (application.responded_at is not None) is kept


def test_normalize_booking_nested_parties():
    booking = normalization.normalize_booking(booking_payload(booking_id=3))
    assert booking.customer.id == 503
    assert booking.customer.full_name == "Customer 3"
    assert booking.photographer.id == 7
    assert booking.status == BookingStatus.CONFIRMED


def test_normalize_booking_flat_parties_and_fallbacks():
    raw = booking_payload(customer=None, photographer=None, customerName="Mai Pham", totalAmount=None)
    booking = normalization.normalize_booking(raw)
    assert booking.customer.full_name == "Mai Pham"
    assert booking.photographer.full_name == "Photographer"
    assert booking.photographer.id == 7
    assert booking.total_amount == 0


def test_normalize_statistics_drops_nulls():
    stats = normalization.normalize_statistics({
        "eventId": 1,
        "eventStatus": "open",
        "totalBookings": 2,
        "totalRevenue": 350000,
        "averageBookingValue": None,
    })
    assert stats.event_status == EventStatus.OPEN
    assert stats.total_revenue == Decimal("350000")
    assert stats.average_booking_value == 0
