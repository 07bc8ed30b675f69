"""
Service layer for the AcadLab scheduling engine.

Services hold the business rules. They receive a SQLAlchemy session, the
acting user and the current instant explicitly and reach the database only
through repositories.
"""

from .base import BaseService
from .booking_service import BookingService
from .cancellation_service import CancellationService
from .conflict_checker import ConflictChecker, find_conflicting_reservation
from .schedule_service import ScheduleService
from .slot_generator import build_daily_schedule, find_non_teaching_rule, generate_period_slots
from .system_rules_service import (
    DEFAULT_SYSTEM_RULES,
    StaticSystemRulesProvider,
    SystemRulesProvider,
    load_system_rules,
    provider_from_settings,
)
from .timezone_service import TimezoneService

__all__ = [
    "BaseService",
    "BookingService",
    "CancellationService",
    "ConflictChecker",
    "DEFAULT_SYSTEM_RULES",
    "ScheduleService",
    "StaticSystemRulesProvider",
    "SystemRulesProvider",
    "TimezoneService",
    "build_daily_schedule",
    "find_conflicting_reservation",
    "find_non_teaching_rule",
    "generate_period_slots",
    "load_system_rules",
    "provider_from_settings",
]
