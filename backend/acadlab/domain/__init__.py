"""Pure scheduling data: time rules, computed schedules and value records."""

from .records import (
    RecurrenceFrequency,
    RecurrenceGroupRecord,
    ReservationRecord,
    ReservationStatus,
)
from .schedule import DailySchedule, PeriodSchedule, Slot, slot_id_for
from .time_rules import (
    AcademicPeriod,
    IntervalRule,
    NonTeachingDayRule,
    PeriodRule,
    SpecificDateRule,
    SystemRules,
    WeekdayRule,
)

__all__ = [
    "AcademicPeriod",
    "DailySchedule",
    "IntervalRule",
    "NonTeachingDayRule",
    "PeriodRule",
    "PeriodSchedule",
    "RecurrenceFrequency",
    "RecurrenceGroupRecord",
    "ReservationRecord",
    "ReservationStatus",
    "Slot",
    "SpecificDateRule",
    "SystemRules",
    "WeekdayRule",
    "slot_id_for",
]
