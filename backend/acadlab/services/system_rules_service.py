"""
System rules collaborator.

The engine reads an immutable SystemRules snapshot per operation. Rules come
either from the built-in defaults or from a JSON document shaped like:

    {
      "timeZone": "America/Sao_Paulo",
      "periods": {"morning": {"firstClassTime": "07:00", "classDurationMinutes": 50,
                              "classesCount": 5,
                              "intervals": [{"start": "09:30", "durationMinutes": 20}]}},
      "nonTeachingDays": [{"kind": "weekday", "weekDay": 0}],
      "academicPeriods": [{"id": "2025-1", "name": "2025/1",
                           "startDate": "2025-02-10", "endDate": "2025-07-05"}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from pydantic import ValidationError

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ServiceException
from ..domain.time_rules import (
    IntervalRule,
    PeriodRule,
    SystemRules,
    WeekdayRule,
)
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_RULES = SystemRules(
    periods={
        "morning": PeriodRule(
            first_class_time=7 * 60,
            class_duration_minutes=50,
            classes_count=5,
            intervals=(IntervalRule(start=9 * 60 + 30, duration_minutes=20),),
        ),
        "afternoon": PeriodRule(
            first_class_time=13 * 60,
            class_duration_minutes=50,
            classes_count=5,
            intervals=(IntervalRule(start=15 * 60 + 30, duration_minutes=20),),
        ),
        "evening": PeriodRule(
            first_class_time=19 * 60,
            class_duration_minutes=45,
            classes_count=4,
            intervals=(IntervalRule(start=20 * 60 + 30, duration_minutes=15),),
        ),
    },
    non_teaching_days=[WeekdayRule(week_day=0, description="Sunday")],
)


class SystemRulesProvider(Protocol):
    """Anything that can hand out the current rules snapshot."""

    def get_rules(self) -> SystemRules:
        ...


class StaticSystemRulesProvider:
    """Provider returning one fixed snapshot."""

    def __init__(self, rules: SystemRules = DEFAULT_SYSTEM_RULES):
        TimezoneService.get_timezone(rules.time_zone)
        self._rules = rules

    def get_rules(self) -> SystemRules:
        return self._rules


def load_system_rules(path: Union[str, Path]) -> SystemRules:
    """
    Load and validate a rules document.

    Raises:
        ServiceException: If the file cannot be read or does not validate
        TimezoneConfigurationError: If the document names an unknown timezone
    """
    rules_path = Path(path)
    try:
        payload = json.loads(rules_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(f"Could not read system rules from {rules_path}: {exc}")
        raise ServiceException(f"Could not read system rules from {rules_path}") from exc

    try:
        rules = SystemRules.model_validate(payload)
    except ValidationError as exc:
        logger.error(f"Invalid system rules in {rules_path}: {exc}")
        raise ServiceException(
            f"Invalid system rules in {rules_path}",
            details={"errors": exc.errors(include_url=False)},
        ) from exc

    TimezoneService.get_timezone(rules.time_zone)
    logger.info(
        f"Loaded system rules from {rules_path}: periods={sorted(rules.periods)} "
        f"non_teaching_days={len(rules.non_teaching_days)}"
    )
    return rules


def provider_from_settings(config: Optional[Settings] = None) -> StaticSystemRulesProvider:
    """
    Build a provider from configuration.

    A configured rules file wins; otherwise the defaults are used with the
    configured institution timezone.
    """
    config = config or default_settings
    if config.system_rules_file:
        return StaticSystemRulesProvider(load_system_rules(config.system_rules_file))
    rules = DEFAULT_SYSTEM_RULES.model_copy(update={"time_zone": config.institution_timezone})
    return StaticSystemRulesProvider(rules)
