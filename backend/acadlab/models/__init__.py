"""
Database models for the AcadLab scheduling engine.

Only the tables the engine writes to live here; laboratories and the rest of
the catalog belong to other services and are referenced by id.
"""

from .reservation import RecurrenceGroup, Reservation
from .types import UTCDateTime
from .user import User

__all__ = [
    "RecurrenceGroup",
    "Reservation",
    "User",
    "UTCDateTime",
]
