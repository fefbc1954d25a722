"""
Pydantic schemas for photographer applications to events.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from venue_events.schemas.common import ApiModel, Money


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


class Photographer(ApiModel):
    photographer_id: int
    user_id: Optional[int] = None
    full_name: str
    profile_image: Optional[str] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    years_experience: Optional[int] = None
    hourly_rate: Optional[Money] = None
    phone_number: Optional[str] = None


class Application(ApiModel):
    event_id: int
    photographer_id: int
    special_rate: Optional[Money] = None
    status: ApplicationStatus = ApplicationStatus.APPLIED
    applied_at: datetime
    responded_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    photographer: Photographer

    @property
    def key(self) -> tuple[int, int]:
        return (self.event_id, self.photographer_id)


class ApplicationResponse(ApiModel):
    """Body of POST /respond-application."""

    event_id: int
    photographer_id: int
    status: ApplicationStatus
    rejection_reason: Optional[str] = None
