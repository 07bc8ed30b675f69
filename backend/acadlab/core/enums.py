# backend/acadlab/core/enums.py
"""
Core enums for the AcadLab scheduling engine.

Role names come from the identity collaborator; the engine only cares
about the coarse tier each role maps to.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles issued by the identity collaborator."""

    ADMIN = "ADMIN"
    TECHNICIAN = "TECHNICIAN"
    PROFESSOR = "PROFESSOR"


class ActorTier(str, Enum):
    """
    Coarse authorization tier.

    MANAGER actors may delegate ownership, book weekly series and cancel
    anyone's reservation. BASE actors only act on their own bookings.
    """

    BASE = "base"
    MANAGER = "manager"


MANAGER_ROLES = frozenset({RoleName.ADMIN, RoleName.TECHNICIAN})


def tier_for_role(role: RoleName) -> ActorTier:
    return ActorTier.MANAGER if role in MANAGER_ROLES else ActorTier.BASE
