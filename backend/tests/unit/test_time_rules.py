"""Validation of the institutional rule models."""

from datetime import date

from pydantic import TypeAdapter, ValidationError
import pytest

from acadlab.domain.time_rules import (
    AcademicPeriod,
    IntervalRule,
    NonTeachingDayRule,
    PeriodRule,
    SpecificDateRule,
    SystemRules,
    WeekdayRule,
    format_minutes,
    parse_time_to_minutes,
)


@pytest.mark.parametrize(
    "value,expected",
    [("07:00", 420), ("00:00", 0), ("23:59", 1439), (" 13:05 ", 785), (600, 600)],
)
def test_parse_time_to_minutes(value, expected):
    assert parse_time_to_minutes(value) == expected


@pytest.mark.parametrize("value", ["24:00", "7", "07:60", "ab:cd", "07:00:00"])
def test_parse_time_to_minutes_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_time_to_minutes(value)


def test_format_minutes_wraps_past_midnight():
    assert format_minutes(420) == "07:00"
    assert format_minutes(1440 + 30) == "00:30"


class TestPeriodRule:
    def test_accepts_camel_case_document(self):
        rule = PeriodRule.model_validate(
            {
                "firstClassTime": "07:00",
                "classDurationMinutes": 50,
                "classesCount": 5,
                "intervals": [{"start": "09:30", "durationMinutes": 20}],
            }
        )
        assert rule.first_class_time == 420
        assert rule.intervals == (IntervalRule(start=570, duration_minutes=20),)
        assert rule.intervals[0].end == 590

    def test_intervals_are_sorted(self):
        rule = PeriodRule(
            first_class_time="07:00",
            class_duration_minutes=50,
            classes_count=5,
            intervals=[
                IntervalRule(start="10:20", duration_minutes=10),
                IntervalRule(start="08:40", duration_minutes=10),
            ],
        )
        assert [interval.start for interval in rule.intervals] == [520, 620]

    def test_overlapping_intervals_rejected(self):
        with pytest.raises(ValidationError, match="overlap"):
            PeriodRule(
                first_class_time="07:00",
                class_duration_minutes=50,
                classes_count=5,
                intervals=[
                    IntervalRule(start="09:30", duration_minutes=20),
                    IntervalRule(start="09:40", duration_minutes=5),
                ],
            )

    @pytest.mark.parametrize(
        "field,value",
        [("class_duration_minutes", 0), ("classes_count", 0), ("first_class_time", "25:00")],
    )
    def test_invalid_values_rejected(self, field, value):
        payload = {"first_class_time": "07:00", "class_duration_minutes": 50, "classes_count": 5}
        payload[field] = value
        with pytest.raises(ValidationError):
            PeriodRule(**payload)

    def test_rules_are_immutable(self):
        rule = PeriodRule(first_class_time="07:00", class_duration_minutes=50, classes_count=5)
        with pytest.raises(ValidationError):
            rule.classes_count = 6


class TestNonTeachingDayRules:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(NonTeachingDayRule)
        weekday = adapter.validate_python({"kind": "weekday", "weekDay": 6})
        specific = adapter.validate_python({"kind": "specific-date", "date": "2025-09-07"})
        assert isinstance(weekday, WeekdayRule)
        assert isinstance(specific, SpecificDateRule)
        assert weekday.matches(date(2025, 3, 15))
        assert specific.matches(date(2025, 9, 7))

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(NonTeachingDayRule).validate_python({"kind": "holiday"})

    def test_weekday_out_of_range(self):
        with pytest.raises(ValidationError):
            WeekdayRule(week_day=7)


class TestAcademicPeriod:
    def test_contains_is_inclusive(self):
        period = AcademicPeriod(
            id="2025-1", name="2025/1", start_date="2025-02-10", end_date="2025-07-05"
        )
        assert period.contains(date(2025, 2, 10))
        assert period.contains(date(2025, 7, 5))
        assert not period.contains(date(2025, 7, 6))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            AcademicPeriod(id="x", name="x", start_date="2025-07-05", end_date="2025-02-10")


class TestSystemRules:
    def test_unknown_period_id_rejected(self):
        with pytest.raises(ValidationError, match="Unknown period ids"):
            SystemRules(
                periods={
                    "night": PeriodRule(
                        first_class_time="23:00", class_duration_minutes=30, classes_count=1
                    )
                }
            )

    def test_lookups(self, system_rules):
        assert system_rules.get_period("evening") is None
        assert system_rules.get_period("morning").classes_count == 5
        assert system_rules.get_academic_period("2025-1").name == "2025/1"
        assert system_rules.get_academic_period("2030-2") is None
