"""
Tests for schema invariants and wire serialization.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from tests.factories import NOW, event_payload
from venue_events.schemas import CreateEventRequest, Event, EventStatus, UpdateEventRequest


def test_event_reads_camel_case():
    event = Event.model_validate(event_payload(event_id=3))
    assert event.event_id == 3
    assert event.max_bookings_per_slot == 3
    assert event.status == EventStatus.DRAFT


def test_event_end_must_follow_start():
    with pytest.raises(ValidationError):
        Event.model_validate(event_payload(endDate=event_payload()["startDate"]))


def test_discount_may_equal_original():
    event = Event.model_validate(event_payload(originalPrice=400000, discountedPrice=400000))
    assert event.discounted_price == event.original_price


def test_discount_above_original_rejected():
    with pytest.raises(ValidationError):
        Event.model_validate(event_payload(originalPrice=400000, discountedPrice=400001))


def test_events_are_immutable():
    event = Event.model_validate(event_payload())
    with pytest.raises(ValidationError):
        event.name = "Changed"


def test_create_request_defaults_and_payload():
    request = CreateEventRequest(
        location_id=42,
        name="Spring Family Shoot",
        start_date=NOW + timedelta(days=1),
        end_date=NOW + timedelta(days=2),
        discounted_price=Decimal("199999.50"),
    )
    payload = request.to_payload()

    assert payload["maxPhotographers"] == 5
    assert payload["maxBookingsPerSlot"] == 3
    assert payload["discountedPrice"] == 199999.5
    assert "originalPrice" not in payload


def test_create_request_description_limit():
    with pytest.raises(ValidationError):
        CreateEventRequest(
            location_id=42,
            name="Spring Family Shoot",
            description="x" * 1001,
            start_date=NOW + timedelta(days=1),
            end_date=NOW + timedelta(days=2),
        )


def test_update_request_sends_only_set_fields():
    patch = UpdateEventRequest(status=EventStatus.OPEN, max_photographers=8)
    assert patch.to_payload() == {"maxPhotographers": 8, "status": "Open"}
