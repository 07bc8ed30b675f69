# backend/acadlab/repositories/reservation_repository.py
"""
Reservation Repository for the AcadLab scheduling engine.

All reads exclude CANCELLED rows unless stated otherwise and return immutable
ReservationRecord values. Writes only ever insert CONFIRMED rows or move rows
to CANCELLED; nothing here deletes a reservation.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..domain.records import ReservationRecord, ReservationStatus
from ..models.reservation import Reservation
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ReservationRepository(BaseRepository[Reservation]):
    """Data access for laboratory reservations."""

    def __init__(self, db: Session):
        super().__init__(db, Reservation)
        self.logger = logging.getLogger(__name__)

    def _active_overlapping(self, laboratory_id: str, start: datetime, end: datetime) -> Query:
        # Half-open windows: touching endpoints do not overlap.
        return (
            self._build_query()
            .filter(
                Reservation.laboratory_id == laboratory_id,
                Reservation.status != ReservationStatus.CANCELLED.value,
                Reservation.start_time < end,
                Reservation.end_time > start,
            )
            .order_by(Reservation.start_time.asc(), Reservation.id.asc())
        )

    # Reads

    def get_record(self, reservation_id: str) -> Optional[ReservationRecord]:
        reservation = self.get_by_id(reservation_id)
        return reservation.to_record() if reservation else None

    def find_active_in_window(
        self, laboratory_id: str, window_start: datetime, window_end: datetime
    ) -> List[ReservationRecord]:
        """
        Get non-cancelled reservations overlapping [window_start, window_end).

        Args:
            laboratory_id: Laboratory to read
            window_start: Inclusive UTC lower bound
            window_end: Exclusive UTC upper bound

        Returns:
            Records ordered by start time
        """
        query = self._active_overlapping(laboratory_id, window_start, window_end)
        return [row.to_record() for row in self._execute_query(query)]

    def find_first_conflict(
        self, laboratory_id: str, start: datetime, end: datetime, *, lock: bool = False
    ) -> Optional[ReservationRecord]:
        """
        Return the earliest non-cancelled reservation overlapping [start, end).

        With ``lock=True`` the matching rows are locked FOR UPDATE on backends
        that support row locks. SQLite transactions are already exclusive
        because the engine opens them with BEGIN IMMEDIATE.
        """
        query = self._active_overlapping(laboratory_id, start, end)
        if lock and self.supports_row_locks:
            query = query.with_for_update()
        row = self._execute_first(query)
        return row.to_record() if row else None

    def list_series(self, recurrence_id: str) -> List[ReservationRecord]:
        """Every reservation of a series, cancelled ones included."""
        query = (
            self._build_query()
            .filter(Reservation.recurrence_id == recurrence_id)
            .order_by(Reservation.start_time.asc())
        )
        return [row.to_record() for row in self._execute_query(query)]

    # Writes

    def create(  # type: ignore[override]
        self,
        *,
        laboratory_id: str,
        created_by_id: str,
        start_time: datetime,
        end_time: datetime,
        created_at: datetime,
        subject: Optional[str] = None,
        recurrence_id: Optional[str] = None,
    ) -> ReservationRecord:
        """Insert a CONFIRMED reservation. Does not commit."""
        reservation = super().create(
            laboratory_id=laboratory_id,
            created_by_id=created_by_id,
            start_time=start_time,
            end_time=end_time,
            status=ReservationStatus.CONFIRMED.value,
            subject=subject,
            recurrence_id=recurrence_id,
            created_at=created_at,
            updated_at=created_at,
        )
        return reservation.to_record()

    def cancel_one(
        self, reservation_id: str, reason: Optional[str], cancelled_at: datetime
    ) -> int:
        """
        Cancel a single reservation if it is not already cancelled.

        The status check is part of the UPDATE so concurrent cancellations
        cannot overwrite each other's reason or timestamp.

        Returns:
            Number of rows changed (0 or 1)
        """
        stmt = (
            update(Reservation)
            .where(
                Reservation.id == reservation_id,
                Reservation.status != ReservationStatus.CANCELLED.value,
            )
            .values(
                status=ReservationStatus.CANCELLED.value,
                cancellation_reason=reason,
                cancelled_at=cancelled_at,
                updated_at=cancelled_at,
            )
            .execution_options(synchronize_session="fetch")
        )
        try:
            return self.db.execute(stmt).rowcount
        except SQLAlchemyError as e:
            self.logger.error(f"Error cancelling reservation {reservation_id}: {str(e)}")
            raise RepositoryException(f"Failed to cancel reservation: {str(e)}") from e

    def cancel_series_from(
        self,
        recurrence_id: str,
        from_start: datetime,
        reason: Optional[str],
        cancelled_at: datetime,
    ) -> List[str]:
        """
        Cancel every active occurrence of a series starting at or after ``from_start``.

        Returns:
            Ids of the reservations that were cancelled, in start order
        """
        try:
            ids = [
                row.id
                for row in self.db.query(Reservation.id)
                .filter(
                    Reservation.recurrence_id == recurrence_id,
                    Reservation.status != ReservationStatus.CANCELLED.value,
                    Reservation.start_time >= from_start,
                )
                .order_by(Reservation.start_time.asc())
                .all()
            ]
            if not ids:
                return []

            stmt = (
                update(Reservation)
                .where(
                    Reservation.id.in_(ids),
                    Reservation.status != ReservationStatus.CANCELLED.value,
                )
                .values(
                    status=ReservationStatus.CANCELLED.value,
                    cancellation_reason=reason,
                    cancelled_at=cancelled_at,
                    updated_at=cancelled_at,
                )
                .execution_options(synchronize_session="fetch")
            )
            self.db.execute(stmt)
            return ids
        except SQLAlchemyError as e:
            self.logger.error(f"Error cancelling series {recurrence_id}: {str(e)}")
            raise RepositoryException(f"Failed to cancel reservation series: {str(e)}") from e
