"""
Slot generation.

Turns a day's period rules into concrete bookable slots. Everything here is
pure: the caller supplies the rules, the reservations already fetched for the
day, and the current instant.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
import logging
from typing import List, Optional, Sequence

from ..core.constants import PERIOD_IDS, PERIOD_LABELS
from ..domain.records import ReservationRecord
from ..domain.schedule import DailySchedule, PeriodSchedule, Slot, slot_id_for
from ..domain.time_rules import NonTeachingDayRule, PeriodRule, SystemRules
from .conflict_checker import find_conflicting_reservation
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)


def generate_period_slots(
    period_id: str,
    rule: PeriodRule,
    day: date,
    time_zone: str,
    now: datetime,
    reservations: Sequence[ReservationRecord] = (),
) -> List[Slot]:
    """
    Lay out ``rule.classes_count`` classes for one period, skipping breaks.

    Before each class the cursor first jumps past every interval that has
    already started, then past the next interval if the class would run into
    it. Only one interval is consumed by that second step, so a class may
    still overlap a later, back-to-back interval.
    """
    intervals = rule.intervals
    duration = rule.class_duration_minutes
    slots: List[Slot] = []
    interval_index = 0
    cursor = rule.first_class_time

    for class_index in range(1, rule.classes_count + 1):
        while interval_index < len(intervals) and cursor >= intervals[interval_index].start:
            current = intervals[interval_index]
            cursor = max(cursor, current.start) + current.duration_minutes
            interval_index += 1

        if interval_index < len(intervals):
            upcoming = intervals[interval_index]
            if cursor + duration > upcoming.start:
                cursor = max(cursor, upcoming.start) + upcoming.duration_minutes
                interval_index += 1

        start = TimezoneService.local_minutes_to_utc(day, cursor, time_zone)
        end = start + timedelta(minutes=duration)
        conflict = find_conflicting_reservation(reservations, start, end)

        slots.append(
            Slot(
                id=slot_id_for(start),
                period_id=period_id,
                class_index=class_index,
                start=start,
                end=end,
                is_occupied=conflict is not None,
                is_past=end <= now,
                reservation=conflict,
            )
        )
        cursor += duration

    return slots


def find_non_teaching_rule(
    day: date, rules: Sequence[NonTeachingDayRule]
) -> Optional[NonTeachingDayRule]:
    """First configured rule matching ``day``; configuration order wins."""
    for rule in rules:
        if rule.matches(day):
            return rule
    return None


def build_daily_schedule(
    date_str: str,
    rules: SystemRules,
    reservations: Sequence[ReservationRecord],
    now: datetime,
) -> DailySchedule:
    """
    Assemble the full schedule for a local date.

    Non-teaching days are flagged but still carry their slots; it is up to the
    booking path to refuse them. Periods without a rule yield no slots.
    """
    day = TimezoneService.parse_iso_date(date_str)
    non_teaching = find_non_teaching_rule(day, rules.non_teaching_days)

    periods = []
    for period_id in PERIOD_IDS:
        rule = rules.get_period(period_id)
        slots = (
            generate_period_slots(period_id, rule, day, rules.time_zone, now, reservations)
            if rule is not None
            else []
        )
        periods.append(
            PeriodSchedule(id=period_id, label=PERIOD_LABELS[period_id], slots=slots)
        )

    if non_teaching is not None:
        logger.debug(f"{date_str} is a non-teaching day ({non_teaching.kind})")

    return DailySchedule(
        date=date_str,
        time_zone=rules.time_zone,
        periods=periods,
        is_non_teaching_day=non_teaching is not None,
        non_teaching_reason=non_teaching.description if non_teaching else None,
    )
