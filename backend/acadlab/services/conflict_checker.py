# backend/acadlab/services/conflict_checker.py
"""
Conflict Checker Service for the AcadLab scheduling engine.

Handles reservation conflict detection:
- Marking generated slots as occupied from an in-memory reservation list
- The authoritative in-transaction check used before inserting a reservation

Windows are half-open: [start, end). A reservation ending exactly when
another starts is not a conflict. Cancelled reservations never conflict.
"""

from datetime import datetime
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..domain.records import ReservationRecord
from ..repositories.factory import RepositoryFactory
from ..repositories.reservation_repository import ReservationRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def overlaps(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    return start_a < end_b and end_a > start_b


def find_conflicting_reservation(
    reservations: Iterable[ReservationRecord], start: datetime, end: datetime
) -> Optional[ReservationRecord]:
    """
    Return the first non-cancelled reservation overlapping [start, end).

    Order of ``reservations`` is preserved, so callers passing a list sorted by
    start get the earliest conflict.
    """
    for reservation in reservations:
        if reservation.is_cancelled:
            continue
        if overlaps(reservation.start_time, reservation.end_time, start, end):
            return reservation
    return None


class ConflictChecker(BaseService):
    """
    Service for checking reservation conflicts against the store.

    The check runs on the caller's session so it sees, and on PostgreSQL
    locks, the same rows the caller is about to write next to.
    """

    def __init__(self, db: Session, repository: Optional[ReservationRepository] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_reservation_repository(db)

    @BaseService.measure_operation("find_conflict")
    def find_conflict(
        self, laboratory_id: str, start: datetime, end: datetime, *, lock: bool = True
    ) -> Optional[ReservationRecord]:
        """
        Find the earliest active reservation overlapping [start, end).

        Args:
            laboratory_id: Laboratory to check
            start: UTC start of the candidate window
            end: UTC end of the candidate window
            lock: Lock matching rows where the backend supports it

        Returns:
            The conflicting reservation, or None when the window is free
        """
        conflict = self.repository.find_first_conflict(laboratory_id, start, end, lock=lock)
        if conflict:
            self.logger.info(
                f"Conflict for lab {laboratory_id} between {start.isoformat()} and "
                f"{end.isoformat()}: reservation {conflict.id}"
            )
        return conflict

    def has_conflict(self, laboratory_id: str, start: datetime, end: datetime) -> bool:
        return self.find_conflict(laboratory_id, start, end, lock=False) is not None
