"""
Centralized timezone handling for AcadLab.

Rules:
- Every schedule computation happens in the institution's IANA timezone
- All storage: UTC
- All comparisons: UTC
- Local wall-clock times are resolved with the offset valid on that date,
  not today's offset, so DST transitions are handled per day
"""

from datetime import date, datetime, time, timedelta, timezone
import re

import pytz

from ..core.exceptions import InvalidDateFormatException, TimezoneConfigurationError

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TimezoneService:
    """Handles all timezone conversions consistently."""

    @staticmethod
    def get_timezone(tz_str: str) -> pytz.BaseTzInfo:
        """
        Get a timezone object.

        Raises:
            TimezoneConfigurationError: If the identifier is not a known IANA zone
        """
        try:
            return pytz.timezone(tz_str)
        except pytz.UnknownTimeZoneError as exc:
            raise TimezoneConfigurationError(f"Unknown IANA timezone: {tz_str!r}") from exc

    @staticmethod
    def parse_iso_date(value: str) -> date:
        """
        Parse a strict YYYY-MM-DD calendar date.

        Raises:
            InvalidDateFormatException: On any other shape or an impossible date
        """
        if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
            raise InvalidDateFormatException(value)
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise InvalidDateFormatException(value) from exc

    @staticmethod
    def localize(naive_dt: datetime, timezone_str: str) -> datetime:
        """
        Attach the institution timezone to a naive local datetime.

        Ambiguous times (fall back) resolve to the first occurrence.
        Nonexistent times (spring forward) are read with the pre-transition
        offset, which places them just after the gap.
        """
        tz = TimezoneService.get_timezone(timezone_str)
        try:
            # is_dst=None raises exception for ambiguous/nonexistent times
            return tz.localize(naive_dt, is_dst=None)
        except pytz.exceptions.AmbiguousTimeError:
            return tz.localize(naive_dt, is_dst=True)
        except pytz.exceptions.NonExistentTimeError:
            return tz.normalize(tz.localize(naive_dt, is_dst=False))

    @staticmethod
    def local_minutes_to_utc(day: date, minutes: int, timezone_str: str) -> datetime:
        """
        Convert ``day`` at ``minutes`` past local midnight to a UTC instant.

        Minute offsets of a day or more roll into the following days.
        """
        extra_days, minute_of_day = divmod(minutes, 24 * 60)
        local_day = day + timedelta(days=extra_days)
        naive_dt = datetime.combine(
            local_day, time(minute_of_day // 60, minute_of_day % 60)
        )  # utc-naive-ok: Intentionally naive for pytz.localize()
        return TimezoneService.localize(naive_dt, timezone_str).astimezone(timezone.utc)

    @staticmethod
    def get_start_of_day(date_str: str, timezone_str: str) -> datetime:
        """UTC instant of local midnight on ``date_str``."""
        day = TimezoneService.parse_iso_date(date_str)
        return TimezoneService.local_minutes_to_utc(day, 0, timezone_str)

    @staticmethod
    def get_end_of_day(date_str: str, timezone_str: str) -> datetime:
        """
        UTC instant of the next local midnight (exclusive end of ``date_str``).

        The resulting day is 23 or 25 hours long on DST transition dates.
        """
        day = TimezoneService.parse_iso_date(date_str)
        return TimezoneService.local_minutes_to_utc(day + timedelta(days=1), 0, timezone_str)

    @staticmethod
    def utc_to_local(utc_dt: datetime, timezone_str: str) -> datetime:
        """Convert UTC datetime to local timezone."""
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=timezone.utc)

        tz = TimezoneService.get_timezone(timezone_str)
        return utc_dt.astimezone(tz)

    @staticmethod
    def iso_date_in_timezone(instant: datetime, timezone_str: str) -> str:
        """Local calendar date of an instant, as YYYY-MM-DD."""
        return TimezoneService.utc_to_local(instant, timezone_str).date().isoformat()

    @staticmethod
    def weekday_index(day: date) -> int:
        """Weekday with Sunday as 0 and Saturday as 6."""
        return (day.weekday() + 1) % 7

    @staticmethod
    def shift_local_days(instant: datetime, days: int, timezone_str: str) -> datetime:
        """
        Move an instant by whole local calendar days, keeping its wall-clock time.

        Across a DST change the UTC distance is not ``days * 24h``; a class at
        08:00 stays at 08:00 local.
        """
        local = TimezoneService.utc_to_local(instant, timezone_str)
        naive_target = local.replace(tzinfo=None) + timedelta(
            days=days
        )  # utc-naive-ok: Intentionally naive for pytz.localize()
        return TimezoneService.localize(naive_target, timezone_str).astimezone(timezone.utc)

    @staticmethod
    def today(now: datetime, timezone_str: str) -> date:
        """Local calendar date of ``now``."""
        return TimezoneService.utc_to_local(now, timezone_str).date()
