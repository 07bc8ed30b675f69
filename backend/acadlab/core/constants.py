# backend/acadlab/core/constants.py
"""
Scheduling constants shared across the engine.
"""

DEFAULT_TIMEZONE = "America/Sao_Paulo"

MINUTES_PER_DAY = 24 * 60

# Period ids are fixed; display order follows this tuple.
PERIOD_IDS = ("morning", "afternoon", "evening")

PERIOD_LABELS = {
    "morning": "Morning",
    "afternoon": "Afternoon",
    "evening": "Evening",
}

DEFAULT_MAX_OCCURRENCES = 26
DEFAULT_CANCEL_REASON_MAX_LENGTH = 500
DEFAULT_AVAILABILITY_LOOKAHEAD_DAYS = 120

SUBJECT_MIN_LENGTH = 2
SUBJECT_MAX_LENGTH = 120

DAYS_PER_WEEK = 7
