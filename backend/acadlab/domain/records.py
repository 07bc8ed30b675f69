"""
Immutable value records handed out by the repository layer.

Services never hold on to live ORM rows; every read is converted into one of
these records so results stay valid after the session is closed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ReservationStatus(str, Enum):
    """Reservation lifecycle statuses."""

    PENDING = "PENDING"  # Reserved for approval workflows
    CONFIRMED = "CONFIRMED"  # Default for every booking created by the engine
    CANCELLED = "CANCELLED"


class RecurrenceFrequency(str, Enum):
    WEEKLY = "WEEKLY"


@dataclass(frozen=True)
class ReservationRecord:
    id: str
    laboratory_id: str
    created_by_id: str
    start_time: datetime
    end_time: datetime
    status: ReservationStatus
    created_at: datetime
    recurrence_id: Optional[str] = None
    subject: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == ReservationStatus.CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["status"] = self.status.value
        return payload


@dataclass(frozen=True)
class RecurrenceGroupRecord:
    id: str
    laboratory_id: str
    created_by_id: str
    frequency: RecurrenceFrequency
    interval: int
    week_day: int
    start_date: datetime
    end_date: datetime
    created_at: datetime
    subject: Optional[str] = None
