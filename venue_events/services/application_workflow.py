"""
Owner-side workflow for photographer applications.

An application starts as Applied. The venue owner approves or rejects it, the
photographer may withdraw it. Approved, Rejected and Withdrawn are terminal:
re-applying is not modelled here.
"""

from datetime import datetime, timezone
from typing import Optional

from venue_events.core.errors import InvalidApplicationStateError, MissingRejectionReasonError
from venue_events.schemas.application import Application, ApplicationStatus

OWNER_DECISIONS = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED})


def _clean_reason(rejection_reason: Optional[str]) -> Optional[str]:
    if rejection_reason is None:
        return None
    return rejection_reason.strip() or None


def validate_response(
    application: Application,
    decision: ApplicationStatus,
    rejection_reason: Optional[str] = None,
) -> None:
    """
    Check that the owner may record `decision` on `application`.

    Raises:
        InvalidApplicationStateError: decision is not Approved/Rejected, or the
            application is no longer Applied.
        MissingRejectionReasonError: rejecting without a non-blank reason.
    """
    if decision not in OWNER_DECISIONS:
        raise InvalidApplicationStateError(application.status.value, decision.value)

    if application.status != ApplicationStatus.APPLIED:
        raise InvalidApplicationStateError(application.status.value, decision.value)

    if decision == ApplicationStatus.REJECTED and _clean_reason(rejection_reason) is None:
        raise MissingRejectionReasonError()


def respond(
    application: Application,
    decision: ApplicationStatus,
    rejection_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Application:
    """Return the application after the owner's decision has been recorded."""
    validate_response(application, decision, rejection_reason)

    return application.model_copy(update={
        "status": decision,
        "responded_at": now or datetime.now(timezone.utc),
        "rejection_reason": (
            _clean_reason(rejection_reason) if decision == ApplicationStatus.REJECTED else None
        ),
    })


def withdraw(application: Application) -> Application:
    """Photographer pulls an application that has not been answered yet."""
    if application.status != ApplicationStatus.APPLIED:
        raise InvalidApplicationStateError(
            application.status.value, ApplicationStatus.WITHDRAWN.value
        )
    return application.model_copy(update={
        "status": ApplicationStatus.WITHDRAWN,
        "responded_at": None,
        "rejection_reason": None,
    })
