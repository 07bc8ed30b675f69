# backend/acadlab/repositories/user_repository.py
"""
User Repository.

Read-only lookups used to validate reservation owners.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)

    def get_active_user(self, user_id: str) -> Optional[User]:
        """Return the user only if the account exists and is active."""
        return self.find_one_by(id=user_id, is_active=True)
