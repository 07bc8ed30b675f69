# backend/acadlab/core/exceptions.py
"""
Domain-specific exceptions for the AcadLab scheduling engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when request validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when the actor lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str = "You don't have permission to perform this action",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="FORBIDDEN", details=details)


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific scheduling exceptions


class InvalidDateFormatException(ValidationException):
    """Raised when a date is not a well-formed YYYY-MM-DD calendar date."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid date: {value!r}. Expected YYYY-MM-DD",
            code="INVALID_DATE_FORMAT",
            details={"value": str(value)},
        )


class InvalidSlotException(ValidationException):
    """Raised when a slot identifier is malformed or no longer exists."""

    def __init__(self, slot_id: Any, message: Optional[str] = None):
        super().__init__(
            message=message or f"Invalid slot identifier: {slot_id!r}",
            code="INVALID_SLOT",
            details={"slot_id": str(slot_id)},
        )


class CrossDayBookingException(ValidationException):
    """Raised when selected slots do not all fall on the requested date."""

    def __init__(self, requested_date: str, slot_date: str):
        super().__init__(
            message="All selected slots must belong to the same day",
            code="CROSS_DAY_BOOKING",
            details={"requested_date": requested_date, "slot_date": slot_date},
        )


class DuplicateSlotException(ValidationException):
    """Raised when the same slot is selected more than once."""

    def __init__(self, slot_id: str):
        super().__init__(
            message="The same slot cannot be selected more than once",
            code="DUPLICATE_SLOT",
            details={"slot_id": slot_id},
        )


class NonContiguousSelectionException(ValidationException):
    """Raised when a selection skips slots between its first and last slot."""

    def __init__(self, missing_slot_ids: list[str]):
        super().__init__(
            message="Select every intermediate slot between the first and the last one",
            code="NON_CONTIGUOUS_SELECTION",
            details={"missing_slot_ids": missing_slot_ids},
        )


class OwnerNotFoundException(NotFoundException):
    """Raised when a delegated owner does not reference an active account."""

    def __init__(self, owner_id: str):
        super().__init__(
            message="The selected owner does not reference an active account",
            code="OWNER_NOT_FOUND",
            details={"owner_id": owner_id},
        )


class AcademicPeriodNotFoundException(NotFoundException):
    """Raised when an academic period id is not configured."""

    def __init__(self, academic_period_id: str):
        super().__init__(
            message="Academic period not found",
            code="ACADEMIC_PERIOD_NOT_FOUND",
            details={"academic_period_id": academic_period_id},
        )


class ReservationNotFoundException(NotFoundException):
    """Raised when a reservation does not exist."""

    def __init__(self, reservation_id: str):
        super().__init__(
            message="Reservation not found",
            code="RESERVATION_NOT_FOUND",
            details={"reservation_id": reservation_id},
        )


class DateOutsideAcademicPeriodException(BusinessRuleException):
    """Raised when the requested date is outside the selected academic period."""

    def __init__(self, requested_date: str, start_date: str, end_date: str):
        super().__init__(
            message=(
                f"Date {requested_date} is outside the academic period "
                f"({start_date} to {end_date})"
            ),
            code="DATE_OUTSIDE_ACADEMIC_PERIOD",
            details={
                "requested_date": requested_date,
                "start_date": start_date,
                "end_date": end_date,
            },
        )


class NonTeachingDayException(BusinessRuleException):
    """Raised when a booking targets a non-teaching day."""

    def __init__(self, day: str, reason: Optional[str] = None):
        message = f"{day} is a non-teaching day"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(
            message=message,
            code="NON_TEACHING_DAY",
            details={"date": day, "reason": reason},
        )


class SlotInPastException(BusinessRuleException):
    """Raised when a selected slot has already ended."""

    def __init__(self, slot_id: str):
        super().__init__(
            message="Slots that have already passed cannot be booked",
            code="SLOT_IN_PAST",
            details={"slot_id": slot_id},
        )


class SlotConflictException(ConflictException):
    """Raised when a reservation overlaps an existing non-cancelled reservation."""

    def __init__(
        self,
        conflict_date: str,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = {"conflict_date": conflict_date}
        merged.update(details or {})
        super().__init__(
            message=message or f"A confirmed reservation already exists on {conflict_date}",
            code="SLOT_CONFLICT",
            details=merged,
        )
        self.conflict_date = conflict_date


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class TimezoneConfigurationError(RuntimeError):
    """Raised when the institutional timezone identifier is not a valid IANA zone."""
