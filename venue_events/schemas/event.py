"""
Pydantic schemas for venue events and the requests that create or change them.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator

from venue_events.schemas.common import ApiModel, Money


class EventStatus(str, Enum):
    DRAFT = "Draft"
    OPEN = "Open"
    ACTIVE = "Active"
    CLOSED = "Closed"
    CANCELLED = "Cancelled"


class EventLocation(ApiModel):
    location_id: int
    name: str
    address: Optional[str] = None


class EventImage(ApiModel):
    id: int
    url: str
    event_id: Optional[int] = None
    is_primary: bool = False
    caption: Optional[str] = None
    created_at: Optional[datetime] = None


def _check_prices(discounted: Optional[Money], original: Optional[Money]) -> None:
    if discounted is not None and original is not None and discounted > original:
        raise ValueError("discountedPrice cannot exceed originalPrice")


class Event(ApiModel):
    event_id: int
    location_id: int
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    original_price: Optional[Money] = None
    discounted_price: Optional[Money] = None
    max_photographers: int = Field(..., gt=0)
    max_bookings_per_slot: int = Field(..., gt=0)
    status: EventStatus = EventStatus.DRAFT
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    location: Optional[EventLocation] = None
    images: tuple[EventImage, ...] = ()
    primary_image: Optional[EventImage] = None

    # Denormalized from applications/bookings
    approved_photographers_count: int = 0
    total_bookings_count: int = 0
    total_applications_count: int = 0
    pending_applications_count: int = 0

    @model_validator(mode="after")
    def check_invariants(self) -> "Event":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        _check_prices(self.discounted_price, self.original_price)
        return self


class CreateEventRequest(ApiModel):
    location_id: int
    name: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    start_date: datetime
    end_date: datetime
    discounted_price: Optional[Money] = Field(None, gt=0)
    original_price: Optional[Money] = Field(None, gt=0)
    max_photographers: int = Field(5, ge=1, le=100)
    max_bookings_per_slot: int = Field(3, ge=1, le=50)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def check_invariants(self) -> "CreateEventRequest":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        _check_prices(self.discounted_price, self.original_price)
        return self


class UpdateEventRequest(ApiModel):
    """Partial update; only fields that are set are sent."""

    name: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    discounted_price: Optional[Money] = Field(None, gt=0)
    original_price: Optional[Money] = Field(None, gt=0)
    max_photographers: Optional[int] = Field(None, ge=1, le=100)
    max_bookings_per_slot: Optional[int] = Field(None, ge=1, le=50)
    status: Optional[EventStatus] = None

    @model_validator(mode="after")
    def check_invariants(self) -> "UpdateEventRequest":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        _check_prices(self.discounted_price, self.original_price)
        return self


class EventFilters(ApiModel):
    location_id: Optional[int] = None
    status: Optional[EventStatus] = None
    search_term: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
