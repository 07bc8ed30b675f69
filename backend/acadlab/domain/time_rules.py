# backend/acadlab/domain/time_rules.py
"""
Institutional time rules as immutable data.

Times of day are minutes since local midnight. Configuration files may also
use "HH:MM" strings; both forms are accepted on input and normalized to
minutes.
"""

from __future__ import annotations

import datetime as dt
from datetime import date
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.constants import DEFAULT_TIMEZONE, MINUTES_PER_DAY, PERIOD_IDS


def parse_time_to_minutes(value: Any) -> Any:
    """Convert "HH:MM" to minutes since midnight; other values pass through."""
    if not isinstance(value, str):
        return value
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid time of day: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if minutes >= 60:
        raise ValueError(f"Invalid time of day: {value!r}")
    total = hours * 60 + minutes
    if total >= MINUTES_PER_DAY:
        raise ValueError(f"Invalid time of day: {value!r}")
    return total


def format_minutes(total_minutes: int) -> str:
    normalized = total_minutes % MINUTES_PER_DAY
    return f"{normalized // 60:02d}:{normalized % 60:02d}"


class _FrozenRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class IntervalRule(_FrozenRule):
    """A break inside a period."""

    start: int = Field(..., ge=0, lt=MINUTES_PER_DAY)
    duration_minutes: int = Field(..., ge=0, alias="durationMinutes")

    @field_validator("start", mode="before")
    @classmethod
    def parse_start(cls, value: Any) -> Any:
        return parse_time_to_minutes(value)

    @property
    def end(self) -> int:
        return self.start + self.duration_minutes


class PeriodRule(_FrozenRule):
    """
    Class layout of one period.

    Intervals are sorted by start on construction and must not overlap each
    other; a rule that violates this is rejected.
    """

    first_class_time: int = Field(..., ge=0, lt=MINUTES_PER_DAY, alias="firstClassTime")
    class_duration_minutes: int = Field(..., gt=0, alias="classDurationMinutes")
    classes_count: int = Field(..., ge=1, alias="classesCount")
    intervals: tuple[IntervalRule, ...] = ()

    @field_validator("first_class_time", mode="before")
    @classmethod
    def parse_first_class_time(cls, value: Any) -> Any:
        return parse_time_to_minutes(value)

    @field_validator("intervals", mode="after")
    @classmethod
    def validate_intervals(
        cls, intervals: tuple[IntervalRule, ...]
    ) -> tuple[IntervalRule, ...]:
        ordered = tuple(sorted(intervals, key=lambda interval: interval.start))
        for previous, current in zip(ordered, ordered[1:]):
            if current.start < previous.end:
                raise ValueError(
                    f"Intervals at {format_minutes(previous.start)} and "
                    f"{format_minutes(current.start)} overlap"
                )
        return ordered


class SpecificDateRule(_FrozenRule):
    kind: Literal["specific-date"] = "specific-date"
    date: dt.date
    repeats_annually: bool = Field(False, alias="repeatsAnnually")
    description: Optional[str] = None
    id: Optional[str] = None

    def matches(self, day: date) -> bool:
        if self.repeats_annually:
            return (self.date.month, self.date.day) == (day.month, day.day)
        return self.date == day


class WeekdayRule(_FrozenRule):
    """Recurring closure on a weekday (0=Sunday ... 6=Saturday)."""

    kind: Literal["weekday"] = "weekday"
    week_day: int = Field(..., ge=0, le=6, alias="weekDay")
    description: Optional[str] = None
    id: Optional[str] = None

    def matches(self, day: date) -> bool:
        # date.weekday() is Monday=0; shift so Sunday=0.
        return (day.weekday() + 1) % 7 == self.week_day


NonTeachingDayRule = Annotated[
    Union[SpecificDateRule, WeekdayRule], Field(discriminator="kind")
]


class AcademicPeriod(_FrozenRule):
    id: str
    name: str
    type: str = "semester"
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")

    @model_validator(mode="after")
    def validate_bounds(self) -> "AcademicPeriod":
        if self.end_date < self.start_date:
            raise ValueError("Academic period end_date must not precede start_date")
        return self

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class SystemRules(_FrozenRule):
    """Snapshot of every rule the scheduling engine reads."""

    time_zone: str = Field(DEFAULT_TIMEZONE, alias="timeZone")
    periods: Dict[str, PeriodRule] = Field(default_factory=dict)
    non_teaching_days: List[NonTeachingDayRule] = Field(
        default_factory=list, alias="nonTeachingDays"
    )
    academic_periods: List[AcademicPeriod] = Field(default_factory=list, alias="academicPeriods")

    @field_validator("periods")
    @classmethod
    def validate_period_ids(cls, periods: Dict[str, PeriodRule]) -> Dict[str, PeriodRule]:
        unknown = set(periods) - set(PERIOD_IDS)
        if unknown:
            raise ValueError(f"Unknown period ids: {sorted(unknown)}")
        return periods

    def get_period(self, period_id: str) -> Optional[PeriodRule]:
        return self.periods.get(period_id)

    def get_academic_period(self, academic_period_id: str) -> Optional[AcademicPeriod]:
        for academic_period in self.academic_periods:
            if academic_period.id == academic_period_id:
                return academic_period
        return None
