"""Computed schedule values. Slots are derived on every read and never stored."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .records import ReservationRecord


def slot_id_for(start: datetime) -> str:
    """Slot identifiers are the ISO-8601 UTC start instant."""
    return start.isoformat()


@dataclass(frozen=True)
class Slot:
    id: str
    period_id: str
    class_index: int
    start: datetime
    end: datetime
    is_occupied: bool = False
    is_past: bool = False
    reservation: Optional[ReservationRecord] = None

    @property
    def is_available(self) -> bool:
        return not (self.is_occupied or self.is_past)


@dataclass(frozen=True)
class PeriodSchedule:
    id: str
    label: str
    slots: List[Slot] = field(default_factory=list)


@dataclass(frozen=True)
class DailySchedule:
    date: str
    time_zone: str
    periods: List[PeriodSchedule]
    is_non_teaching_day: bool = False
    non_teaching_reason: Optional[str] = None

    def all_slots(self) -> List[Slot]:
        return [slot for period in self.periods for slot in period.slots]

    def find_slot(self, slot_start: datetime) -> Optional[Slot]:
        for slot in self.all_slots():
            if slot.start == slot_start:
                return slot
        return None

    @property
    def has_available_slot(self) -> bool:
        return any(slot.is_available for slot in self.all_slots())
