# backend/acadlab/core/config.py
import logging
import os
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import (
    DEFAULT_AVAILABILITY_LOOKAHEAD_DAYS,
    DEFAULT_CANCEL_REASON_MAX_LENGTH,
    DEFAULT_MAX_OCCURRENCES,
    DEFAULT_TIMEZONE,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    database_url: str = Field(
        default="sqlite:///./acadlab.db",
        description="SQLAlchemy URL of the reservation store",
    )
    database_echo: bool = False

    institution_timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA timezone used for every schedule computation",
    )
    system_rules_file: Optional[str] = Field(
        default=None,
        description="Optional JSON file with periods, non-teaching days and academic periods",
    )

    max_occurrences: int = Field(default=DEFAULT_MAX_OCCURRENCES, ge=1)
    cancel_reason_max_length: int = Field(default=DEFAULT_CANCEL_REASON_MAX_LENGTH, ge=1)
    availability_lookahead_days: int = Field(default=DEFAULT_AVAILABILITY_LOOKAHEAD_DAYS, ge=0)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        env_prefix="ACADLAB_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("institution_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """A bad timezone is a deployment error, so refuse to start."""
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown IANA timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and embedding applications."""
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT)


def get_settings() -> Settings:
    return settings


settings = Settings()
logger.debug(
    "[CONFIG] Scheduling configuration: timezone=%s max_occurrences=%s",
    settings.institution_timezone,
    settings.max_occurrences,
)
