# backend/acadlab/models/user.py
"""
Minimal user model.

Accounts are owned by the identity collaborator. The scheduling engine only
keeps enough of them to check that a delegated reservation owner exists and
is active, and to anchor the reservation foreign keys.
"""

import logging

from sqlalchemy import Boolean, CheckConstraint, Column, String
from sqlalchemy.orm import relationship

from ..core.enums import RoleName
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Account that can own reservations.

    Attributes:
        id: ULID primary key
        name: Display name
        email: Unique email address
        role: ADMIN, TECHNICIAN or PROFESSOR
        is_active: Inactive accounts cannot receive delegated bookings
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(120), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.PROFESSOR.value)
    is_active = Column(Boolean, nullable=False, default=True)

    reservations = relationship("Reservation", foreign_keys="Reservation.created_by_id")

    __table_args__ = (
        CheckConstraint("role IN ('ADMIN', 'TECHNICIAN', 'PROFESSOR')", name="ck_users_role"),
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
