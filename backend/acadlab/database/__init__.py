"""
Database engine, session factory, and metadata shared across the engine.
"""

from __future__ import annotations

import logging
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from ..core.config import settings

from .engines import build_engine, build_session_factory

logger = logging.getLogger(__name__)

Base: DeclarativeMeta = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


def get_engine() -> Engine:
    """Return the process-wide engine built from settings."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database_url, echo=settings.database_echo)
        logger.info("Database engine created for dialect %s", _engine.dialect.name)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables (development and tests; production uses migrations)."""
    from .. import models  # noqa: F401

    Base.metadata.create_all(engine or get_engine())


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
]
