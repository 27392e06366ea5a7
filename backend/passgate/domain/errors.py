"""Gate error codes and client-facing domain errors."""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Domain error codes."""

    PASS_NOT_FOUND = "PASS_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    INVALID_OVERRIDE = "INVALID_OVERRIDE"
    FULLY_UTILIZED = "FULLY_UTILIZED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    ENTRY_CONFLICT = "ENTRY_CONFLICT"
    EMPTY_SEARCH = "EMPTY_SEARCH"


class DomainError(Exception):
    """Base domain error with code, user-safe message and HTTP status."""

    status_code = 400

    def __init__(self, code: ErrorCode, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EmptySearchError(DomainError):
    """Raised when a scan arrives without a search value."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMPTY_SEARCH,
            message="Pass ID or mobile number required",
        )


class NotFoundError(DomainError):
    """Raised when no booking matches a scan by phone, ID or name."""

    status_code = 404

    def __init__(self, search_value: str) -> None:
        super().__init__(
            code=ErrorCode.PASS_NOT_FOUND,
            message="Pass not found for this Pass ID or mobile number",
        )
        self.search_value = search_value


class BookingNotFoundError(DomainError):
    status_code = 404

    def __init__(self, booking_id: int) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found",
        )
        self.booking_id = booking_id


class InvalidOverrideError(DomainError):
    """Raised when an admin override carries the wrong PIN."""

    status_code = 403

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_OVERRIDE,
            message="Invalid admin PIN",
        )


class FullyUtilizedError(DomainError):
    """Raised when a booking has no headroom left."""

    def __init__(self, total_allowed: int, already_entered: int) -> None:
        super().__init__(
            code=ErrorCode.FULLY_UTILIZED,
            message="Pass fully utilized",
            details={
                "total_allowed": total_allowed,
                "already_entered": already_entered,
                "remaining": 0,
            },
        )


class CapacityExceededError(DomainError):
    """Raised when the requested count is larger than the remaining headroom."""

    def __init__(self, requested: int, total_allowed: int, already_entered: int) -> None:
        remaining = total_allowed - already_entered
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=f"Cannot enter {requested} people. Only {remaining} remaining.",
            details={
                "total_allowed": total_allowed,
                "already_entered": already_entered,
                "remaining": remaining,
            },
        )
        self.remaining = remaining


class EntryConflictError(DomainError):
    """Raised when concurrent check-ins keep winning the version race."""

    status_code = 409

    def __init__(self, booking_id: int) -> None:
        super().__init__(
            code=ErrorCode.ENTRY_CONFLICT,
            message="Booking is being updated by another gate. Please try again.",
        )
        self.booking_id = booking_id
