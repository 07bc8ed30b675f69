"""
Repository layer for the AcadLab scheduling engine.

Repositories wrap every database query; services talk to them (or to a
UnitOfWork that bundles them) instead of the session directly.
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .recurrence_group_repository import RecurrenceGroupRepository
from .reservation_repository import ReservationRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "RecurrenceGroupRepository",
    "RepositoryFactory",
    "ReservationRepository",
    "UserRepository",
]
