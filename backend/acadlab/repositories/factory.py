# backend/acadlab/repositories/factory.py
"""
Repository Factory for the AcadLab scheduling engine.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .recurrence_group_repository import RecurrenceGroupRepository
    from .reservation_repository import ReservationRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services and tests can swap
    implementations in one place.
    """

    @staticmethod
    def create_reservation_repository(db: Session) -> "ReservationRepository":
        """Create repository for reservation reads and writes."""
        from .reservation_repository import ReservationRepository

        return ReservationRepository(db)

    @staticmethod
    def create_recurrence_group_repository(db: Session) -> "RecurrenceGroupRepository":
        from .recurrence_group_repository import RecurrenceGroupRepository

        return RecurrenceGroupRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for owner lookups."""
        from .user_repository import UserRepository

        return UserRepository(db)
