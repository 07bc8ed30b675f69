# backend/acadlab/services/schedule_service.py
"""
Schedule Service for the AcadLab scheduling engine.

Read-only: fetches a laboratory's active reservations once per request and
lays the day's slots out around them.
"""

from datetime import datetime, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..domain.schedule import DailySchedule
from .base import BaseService
from .slot_generator import build_daily_schedule
from .system_rules_service import SystemRulesProvider, provider_from_settings
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)


class ScheduleService(BaseService):
    def __init__(
        self,
        db: Session,
        rules_provider: Optional[SystemRulesProvider] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.config = config or default_settings
        self.rules_provider = rules_provider or provider_from_settings(self.config)

    @BaseService.measure_operation("get_daily_schedule")
    def get_daily_schedule(
        self, laboratory_id: str, date_str: str, now: datetime
    ) -> DailySchedule:
        """
        Build the slot grid of one local date for a laboratory.

        Raises:
            InvalidDateFormatException: If ``date_str`` is not YYYY-MM-DD
        """
        rules = self.rules_provider.get_rules()
        window_start = TimezoneService.get_start_of_day(date_str, rules.time_zone)
        window_end = TimezoneService.get_end_of_day(date_str, rules.time_zone)

        with self.read_transaction() as uow:
            reservations = uow.reservations.find_active_in_window(
                laboratory_id, window_start, window_end
            )

        return build_daily_schedule(date_str, rules, reservations, now)

    @BaseService.measure_operation("get_fully_booked_dates")
    def get_fully_booked_dates(
        self, laboratory_id: str, now: datetime, lookahead_days: Optional[int] = None
    ) -> List[str]:
        """
        Local dates from today through today + lookahead with no bookable slot.

        A slot is bookable when it is neither past nor occupied. Days without
        any configured slot count as fully booked.
        """
        rules = self.rules_provider.get_rules()
        time_zone = rules.time_zone
        if lookahead_days is None:
            lookahead_days = self.config.availability_lookahead_days

        today = TimezoneService.today(now, time_zone)
        last_day = today + timedelta(days=lookahead_days)
        window_start = TimezoneService.get_start_of_day(today.isoformat(), time_zone)
        window_end = TimezoneService.get_end_of_day(last_day.isoformat(), time_zone)

        with self.read_transaction() as uow:
            reservations = uow.reservations.find_active_in_window(
                laboratory_id, window_start, window_end
            )

        fully_booked: List[str] = []
        for offset in range(lookahead_days + 1):
            iso_date = (today + timedelta(days=offset)).isoformat()
            schedule = build_daily_schedule(iso_date, rules, reservations, now)
            if not schedule.has_available_slot:
                fully_booked.append(iso_date)

        self.logger.debug(
            f"Lab {laboratory_id}: {len(fully_booked)} fully booked date(s) "
            f"in the next {lookahead_days} day(s)"
        )
        return fully_booked
