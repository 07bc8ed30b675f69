# backend/acadlab/schemas/reservation.py
"""
Request and result schemas for reservation operations.

Requests carry only what the caller chose; the acting user and the current
instant are passed to services separately.
"""

from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from ..core.constants import (
    DEFAULT_CANCEL_REASON_MAX_LENGTH,
    SUBJECT_MAX_LENGTH,
    SUBJECT_MIN_LENGTH,
)
from ..domain.records import RecurrenceGroupRecord, ReservationRecord
from ._strict_base import StrictModel, StrictRequestModel


class ReservationCreate(StrictRequestModel):
    """Booking request for one or more contiguous slots on a single date."""

    laboratory_id: str = Field(..., min_length=1)
    date: str = Field(..., description="Local calendar date, YYYY-MM-DD")
    slot_ids: List[str] = Field(..., min_length=1, description="ISO-8601 UTC slot start instants")
    occurrences: int = Field(1, description="Weekly occurrences; clamped by the booking service")
    owner_id: Optional[str] = Field(None, description="Delegated owner (manager tier only)")
    academic_period_id: Optional[str] = Field(
        None, description="Repeat weekly until the academic period ends (manager tier only)"
    )
    subject: Optional[str] = Field(None, max_length=SUBJECT_MAX_LENGTH)

    @field_validator("owner_id", "academic_period_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if len(value) < SUBJECT_MIN_LENGTH:
            raise ValueError(f"Subject must have at least {SUBJECT_MIN_LENGTH} characters")
        return value


class CancelReservationRequest(StrictRequestModel):
    reservation_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=DEFAULT_CANCEL_REASON_MAX_LENGTH)
    cancel_series: bool = False

    @field_validator("reason")
    @classmethod
    def blank_reason_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class BookingResult(StrictModel):
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    reservations: List[ReservationRecord]
    recurrence_group: Optional[RecurrenceGroupRecord] = None

    @property
    def reservation_ids(self) -> List[str]:
        return [reservation.id for reservation in self.reservations]


class CancellationResult(StrictModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    reservation_id: str
    cancelled_ids: List[str] = Field(default_factory=list)
    already_cancelled: bool = False
    series: bool = False

    @property
    def cancelled_count(self) -> int:
        return len(self.cancelled_ids)
