"""
Unit of work: one session, one transaction, the repositories bound to it.

Everything done through a UnitOfWork commits together or not at all. Callers
either open one themselves with :func:`run_in_transaction` or let a service
wrap its own session in one.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from ..repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UnitOfWork:
    """Repositories sharing a single session and transaction."""

    def __init__(self, session: Session):
        self.session = session
        self.reservations = RepositoryFactory.create_reservation_repository(session)
        self.recurrence_groups = RepositoryFactory.create_recurrence_group_repository(session)
        self.users = RepositoryFactory.create_user_repository(session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def run_in_transaction(
    session_factory: sessionmaker[Session], fn: Callable[[UnitOfWork], T]
) -> T:
    """
    Run ``fn`` inside a fresh session and commit on success.

    Any exception rolls the whole unit back and propagates unchanged.
    """
    session = session_factory()
    uow = UnitOfWork(session)
    try:
        result = fn(uow)
        uow.commit()
        return result
    except Exception:
        logger.debug("Rolling back unit of work")
        uow.rollback()
        raise
    finally:
        session.close()
