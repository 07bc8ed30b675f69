"""Tests for TimezoneService."""

from datetime import date, datetime, timedelta, timezone

import pytest

from acadlab.core.exceptions import InvalidDateFormatException, TimezoneConfigurationError
from acadlab.services.timezone_service import TimezoneService
from tests.utils.scheduling import TEST_TIMEZONE, utc

NEW_YORK = "America/New_York"


class TestParseIsoDate:
    def test_valid_date(self):
        assert TimezoneService.parse_iso_date("2025-03-10") == date(2025, 3, 10)

    @pytest.mark.parametrize(
        "value",
        ["2025-02-30", "2025-3-10", "10/03/2025", "2025-03-10T00:00", "", "abc"],
    )
    def test_rejects_malformed_or_impossible_dates(self, value):
        with pytest.raises(InvalidDateFormatException) as exc_info:
            TimezoneService.parse_iso_date(value)
        assert exc_info.value.code == "INVALID_DATE_FORMAT"

    def test_rejects_non_string(self):
        with pytest.raises(InvalidDateFormatException):
            TimezoneService.parse_iso_date(20250310)  # type: ignore[arg-type]


class TestGetTimezone:
    def test_unknown_zone_is_a_configuration_error(self):
        with pytest.raises(TimezoneConfigurationError):
            TimezoneService.get_timezone("Mars/Olympus_Mons")

    def test_known_zone(self):
        assert TimezoneService.get_timezone(TEST_TIMEZONE).zone == TEST_TIMEZONE


class TestLocalMinutesToUtc:
    def test_sao_paulo_offset(self):
        """07:00 in Sao Paulo (UTC-3) = 10:00 UTC."""
        result = TimezoneService.local_minutes_to_utc(date(2025, 3, 10), 7 * 60, TEST_TIMEZONE)
        assert result == utc(2025, 3, 10, 10, 0)
        assert result.tzinfo == timezone.utc

    def test_uses_offset_valid_on_that_date(self):
        winter = TimezoneService.local_minutes_to_utc(date(2025, 1, 15), 11 * 60, NEW_YORK)
        summer = TimezoneService.local_minutes_to_utc(date(2025, 6, 15), 11 * 60, NEW_YORK)
        assert winter.hour == 16
        assert summer.hour == 15

    def test_minutes_past_midnight_roll_into_next_day(self):
        result = TimezoneService.local_minutes_to_utc(date(2025, 3, 10), 24 * 60 + 60, TEST_TIMEZONE)
        assert result == utc(2025, 3, 11, 4, 0)

    def test_spring_forward_gap_lands_after_the_gap(self):
        """02:30 does not exist on 2025-03-09 in New York; it reads as 03:30 EDT."""
        result = TimezoneService.local_minutes_to_utc(date(2025, 3, 9), 2 * 60 + 30, NEW_YORK)
        assert result == utc(2025, 3, 9, 7, 30)

    def test_fall_back_uses_first_occurrence(self):
        """01:30 happens twice on 2025-11-02 in New York; the EDT one wins."""
        result = TimezoneService.local_minutes_to_utc(date(2025, 11, 2), 90, NEW_YORK)
        assert result == utc(2025, 11, 2, 5, 30)


class TestDayBoundaries:
    def test_start_of_day(self):
        assert TimezoneService.get_start_of_day("2025-03-10", TEST_TIMEZONE) == utc(2025, 3, 10, 3)

    def test_start_of_day_is_idempotent(self):
        first = TimezoneService.get_start_of_day("2025-03-10", TEST_TIMEZONE)
        again = TimezoneService.get_start_of_day(
            TimezoneService.iso_date_in_timezone(first, TEST_TIMEZONE), TEST_TIMEZONE
        )
        assert first == again

    def test_regular_day_is_24_hours(self):
        start = TimezoneService.get_start_of_day("2025-03-10", TEST_TIMEZONE)
        end = TimezoneService.get_end_of_day("2025-03-10", TEST_TIMEZONE)
        assert end - start == timedelta(hours=24)

    def test_spring_forward_day_is_23_hours(self):
        start = TimezoneService.get_start_of_day("2025-03-09", NEW_YORK)
        end = TimezoneService.get_end_of_day("2025-03-09", NEW_YORK)
        assert end - start == timedelta(hours=23)

    def test_fall_back_day_is_25_hours(self):
        start = TimezoneService.get_start_of_day("2025-11-02", NEW_YORK)
        end = TimezoneService.get_end_of_day("2025-11-02", NEW_YORK)
        assert end - start == timedelta(hours=25)

    def test_invalid_date_raises(self):
        with pytest.raises(InvalidDateFormatException):
            TimezoneService.get_end_of_day("2025-13-01", TEST_TIMEZONE)


class TestLocalCalendarHelpers:
    def test_iso_date_in_timezone_uses_local_date(self):
        """02:30 UTC on the 11th is still the 10th in Sao Paulo."""
        assert TimezoneService.iso_date_in_timezone(utc(2025, 3, 11, 2, 30), TEST_TIMEZONE) == "2025-03-10"

    def test_utc_to_local_accepts_naive_utc(self):
        local = TimezoneService.utc_to_local(datetime(2025, 3, 10, 10, 0), TEST_TIMEZONE)
        assert (local.hour, local.minute) == (7, 0)

    @pytest.mark.parametrize(
        "day, expected",
        [(date(2025, 3, 9), 0), (date(2025, 3, 10), 1), (date(2025, 3, 15), 6)],
    )
    def test_weekday_index_starts_on_sunday(self, day, expected):
        assert TimezoneService.weekday_index(day) == expected

    def test_shift_local_days_keeps_wall_clock_across_dst(self):
        """07:00 EST on a Friday stays 07:00 local (now EDT) a week later."""
        before = utc(2025, 3, 7, 12, 0)
        shifted = TimezoneService.shift_local_days(before, 7, NEW_YORK)
        assert shifted == utc(2025, 3, 14, 11, 0)
        local = TimezoneService.utc_to_local(shifted, NEW_YORK)
        assert (local.hour, local.minute) == (7, 0)

    def test_shift_local_days_without_dst_is_plain_weeks(self):
        start = utc(2025, 3, 10, 10, 0)
        assert TimezoneService.shift_local_days(start, 14, TEST_TIMEZONE) == start + timedelta(days=14)

    def test_today(self):
        assert TimezoneService.today(utc(2025, 3, 11, 1, 0), TEST_TIMEZONE) == date(2025, 3, 10)
