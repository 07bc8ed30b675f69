# backend/acadlab/models/reservation.py
"""
Reservation and recurrence models for AcadLab.

A reservation holds an absolute [start_time, end_time) window on one
laboratory. Rows are only ever inserted (CONFIRMED) or moved to CANCELLED;
they are never deleted so booking history stays intact.
"""

import logging

from sqlalchemy import (
    DDL,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from ..domain.records import (
    RecurrenceFrequency,
    RecurrenceGroupRecord,
    ReservationRecord,
    ReservationStatus,
)
from .types import UTCDateTime

logger = logging.getLogger(__name__)

ACTIVE_RESERVATION_PREDICATE = text("status <> 'CANCELLED'")


class RecurrenceGroup(Base):
    """Weekly series created by a single multi-occurrence booking request."""

    __tablename__ = "reservation_recurrences"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    laboratory_id = Column(String(64), nullable=False, index=True)
    created_by_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    frequency = Column(String(16), nullable=False, default=RecurrenceFrequency.WEEKLY.value)
    interval = Column(Integer, nullable=False, default=1)
    week_day = Column(Integer, nullable=False)
    subject = Column(String(120), nullable=True)
    start_date = Column(UTCDateTime(), nullable=False)
    end_date = Column(UTCDateTime(), nullable=False)
    created_at = Column(UTCDateTime(), nullable=False)

    reservations = relationship("Reservation", back_populates="recurrence")

    __table_args__ = (
        CheckConstraint("frequency IN ('WEEKLY')", name="ck_recurrences_frequency"),
        CheckConstraint('"interval" >= 1', name="ck_recurrences_interval_positive"),
        CheckConstraint("week_day BETWEEN 0 AND 6", name="ck_recurrences_week_day"),
    )

    def __repr__(self) -> str:
        return (
            f"<RecurrenceGroup {self.id}: lab={self.laboratory_id}, "
            f"week_day={self.week_day}, {self.start_date}-{self.end_date}>"
        )

    def to_record(self) -> RecurrenceGroupRecord:
        return RecurrenceGroupRecord(
            id=self.id,
            laboratory_id=self.laboratory_id,
            created_by_id=self.created_by_id,
            frequency=RecurrenceFrequency(self.frequency),
            interval=self.interval,
            week_day=self.week_day,
            start_date=self.start_date,
            end_date=self.end_date,
            created_at=self.created_at,
            subject=self.subject,
        )


class Reservation(Base):
    """A laboratory booking over an absolute time window."""

    __tablename__ = "reservations"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    laboratory_id = Column(String(64), nullable=False)
    created_by_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)
    status = Column(
        String(20), nullable=False, default=ReservationStatus.CONFIRMED.value, index=True
    )
    subject = Column(String(120), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(UTCDateTime(), nullable=True)
    recurrence_id = Column(
        String(26),
        ForeignKey("reservation_recurrences.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=True)

    recurrence = relationship("RecurrenceGroup", back_populates="reservations")

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'CANCELLED')",
            name="ck_reservations_status",
        ),
        CheckConstraint("start_time < end_time", name="ck_reservations_time_order"),
        Index("ix_reservations_lab_window", "laboratory_id", "start_time", "end_time"),
        # Last line of defence against two writers committing the same start.
        Index(
            "uq_reservations_lab_start_active",
            "laboratory_id",
            "start_time",
            unique=True,
            sqlite_where=ACTIVE_RESERVATION_PREDICATE,
            postgresql_where=ACTIVE_RESERVATION_PREDICATE,
        ),
        # Overlapping windows with different starts; requires btree_gist for the = operand.
        ExcludeConstraint(
            (laboratory_id, "="),
            (func.tstzrange(start_time, end_time, text("'[)'")), "&&"),
            name="ex_reservations_lab_no_overlap",
            using="gist",
            where=ACTIVE_RESERVATION_PREDICATE,
        ).ddl_if(dialect="postgresql"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation {self.id}: lab={self.laboratory_id}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    def to_record(self) -> ReservationRecord:
        return ReservationRecord(
            id=self.id,
            laboratory_id=self.laboratory_id,
            created_by_id=self.created_by_id,
            start_time=self.start_time,
            end_time=self.end_time,
            status=ReservationStatus(self.status),
            created_at=self.created_at,
            recurrence_id=self.recurrence_id,
            subject=self.subject,
            cancellation_reason=self.cancellation_reason,
            cancelled_at=self.cancelled_at,
        )


event.listen(
    Reservation.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
