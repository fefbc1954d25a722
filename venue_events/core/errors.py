"""
Error codes, domain errors and the command result type.

Validation errors are raised before any network call. Transport errors are
raised by the gateway as GatewayError. The controller catches both and turns
them into a CommandResult plus its single error slot.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(Enum):
    """Error codes surfaced to callers."""

    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    MISSING_REJECTION_REASON = "MISSING_REJECTION_REASON"
    INVALID_APPLICATION_STATE = "INVALID_APPLICATION_STATE"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    APPLICATION_NOT_FOUND = "APPLICATION_NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    OPERATION_IN_PROGRESS = "OPERATION_IN_PROGRESS"
    ABORTED = "ABORTED"
    SUPERSEDED = "SUPERSEDED"
    TRANSPORT = "TRANSPORT"


@dataclass(eq=False)
class DomainError(Exception):
    """Base error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class IllegalTransitionError(DomainError):
    """Raised when an event status change is not allowed."""

    def __init__(self, current: str, target: str, reason: str) -> None:
        super().__init__(code=ErrorCode.ILLEGAL_TRANSITION, message=reason)
        self.current = current
        self.target = target


class MissingRejectionReasonError(DomainError):
    """Raised when an application is rejected without a reason."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.MISSING_REJECTION_REASON,
            message="A rejection reason is required",
        )


class InvalidApplicationStateError(DomainError):
    """Raised when an application cannot move to the requested status."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_APPLICATION_STATE,
            message=f"Cannot change application from {current} to {target}",
        )
        self.current = current
        self.target = target


class EventNotFoundError(DomainError):
    """Raised when an event is not known locally."""

    def __init__(self, event_id: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message=f"Event {event_id} not found",
        )
        self.event_id = event_id


class ApplicationNotFoundError(DomainError):
    """Raised when an application is not in the loaded applications."""

    def __init__(self, event_id: int, photographer_id: int) -> None:
        super().__init__(
            code=ErrorCode.APPLICATION_NOT_FOUND,
            message=f"Application of photographer {photographer_id} to event {event_id} not found",
        )
        self.event_id = event_id
        self.photographer_id = photographer_id


class InvalidEventRequestError(DomainError):
    """Raised when a create/update request fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class OperationInProgressError(DomainError):
    """Raised when the same operation is already in flight."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.OPERATION_IN_PROGRESS,
            message=f"{operation} is already in progress",
        )
        self.operation = operation


class GatewayError(DomainError):
    """Raised for non-2xx responses, network failures and malformed payloads."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(code=ErrorCode.TRANSPORT, message=message)
        self.status_code = status_code


@dataclass(frozen=True)
class CommandResult(Generic[T]):
    """Outcome of a controller command."""

    value: Optional[T] = None
    code: Optional[ErrorCode] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "CommandResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, code: ErrorCode, message: str) -> "CommandResult[T]":
        return cls(code=code, message=message)

    @classmethod
    def from_error(cls, error: DomainError) -> "CommandResult[T]":
        return cls(code=error.code, message=error.message)
