"""Reservation domain events."""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ReservationConfirmed:
    """Fired after a single or recurring reservation is committed."""

    laboratory_id: str
    start_time: datetime
    end_time: datetime
    actor_id: str
    owner_id: str
    occurrences: int
    reservation_ids: List[str] = field(default_factory=list)
    recurrence_id: Optional[str] = None
    subject: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReservationCancelled:
    """Fired after one reservation or the remainder of a series is cancelled."""

    reservation_ids: List[str]
    laboratory_id: str
    start_time: datetime
    # End of the last occurrence cancelled.
    end_time: datetime
    actor_id: str
    cancelled_at: datetime
    series: bool = False
    reason: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.reservation_ids)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["count"] = self.count
        return payload
