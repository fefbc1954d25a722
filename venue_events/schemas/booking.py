"""
Pydantic schemas for customer bookings inside an event.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import model_validator

from venue_events.schemas.common import ApiModel, Money


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class BookingParty(ApiModel):
    """Customer or photographer side of a booking."""

    id: int
    full_name: str
    profile_image: Optional[str] = None
    phone_number: Optional[str] = None


class Booking(ApiModel):
    event_booking_id: int
    event_id: int
    event_photographer_id: int
    user_id: int
    start_datetime: datetime
    end_datetime: datetime
    status: BookingStatus = BookingStatus.PENDING
    total_amount: Money = Decimal("0")
    special_requests: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    customer: BookingParty
    photographer: BookingParty

    @model_validator(mode="after")
    def check_window(self) -> "Booking":
        if self.end_datetime <= self.start_datetime:
            raise ValueError("endDatetime must be after startDatetime")
        return self
