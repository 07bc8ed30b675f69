# backend/tests/conftest.py
"""
Shared fixtures for the AcadLab test suite.

Every test that touches the database gets its own SQLite file under
``tmp_path`` so that concurrent sessions (and BEGIN IMMEDIATE locking) behave
as they would against a real file-backed store.
"""

import os

# Keep a developer's .env out of the test run.
os.environ.setdefault("CI", "true")

from datetime import datetime
from types import SimpleNamespace
from typing import Any, Dict, List, Tuple

import pytest
from sqlalchemy import select

from acadlab.core.config import Settings
from acadlab.core.enums import RoleName
from acadlab.core.ulid_helper import generate_ulid
from acadlab.database import build_engine, build_session_factory, init_db
from acadlab.domain.time_rules import (
    AcademicPeriod,
    IntervalRule,
    PeriodRule,
    SpecificDateRule,
    SystemRules,
    WeekdayRule,
)
from acadlab.events.publisher import EventPublisher
from acadlab.models import RecurrenceGroup, Reservation, User
from acadlab.principal import Actor
from acadlab.services.system_rules_service import StaticSystemRulesProvider
from tests.utils.scheduling import LAB_ID, TEST_TIMEZONE, utc


@pytest.fixture
def now() -> datetime:
    return utc(2025, 3, 1, 12, 0)


@pytest.fixture
def system_rules() -> SystemRules:
    """
    Morning: 07:00-07:50, 07:50-08:40, 08:40-09:30, [break], 09:50-10:40, 10:40-11:30
    Afternoon: 13:00-13:50, 13:50-14:40, 14:40-15:30, 15:30-16:20
    Evening: not configured
    """
    return SystemRules(
        time_zone=TEST_TIMEZONE,
        periods={
            "morning": PeriodRule(
                first_class_time="07:00",
                class_duration_minutes=50,
                classes_count=5,
                intervals=[IntervalRule(start="09:30", duration_minutes=20)],
            ),
            "afternoon": PeriodRule(
                first_class_time="13:00",
                class_duration_minutes=50,
                classes_count=4,
            ),
        },
        non_teaching_days=[
            WeekdayRule(week_day=0, description="Sunday"),
            SpecificDateRule(date="2025-04-18", description="Good Friday"),
            SpecificDateRule(date="2024-12-25", repeats_annually=True, description="Christmas"),
        ],
        academic_periods=[
            AcademicPeriod(
                id="2025-1", name="2025/1", start_date="2025-02-10", end_date="2025-07-05"
            ),
            AcademicPeriod(
                id="march-intensive",
                name="March intensive",
                type="module",
                start_date="2025-03-01",
                end_date="2025-03-31",
            ),
        ],
    )


@pytest.fixture
def rules_provider(system_rules: SystemRules) -> StaticSystemRulesProvider:
    return StaticSystemRulesProvider(system_rules)


@pytest.fixture
def config() -> Settings:
    return Settings(institution_timezone=TEST_TIMEZONE)


@pytest.fixture
def published_events() -> List[Tuple[str, Dict[str, Any]]]:
    return []


@pytest.fixture
def event_publisher(published_events) -> EventPublisher:
    return EventPublisher(sink=lambda event_type, payload: published_events.append((event_type, payload)))


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'acadlab-test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    """Session used by the service under test; always closed after the test."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def users(session_factory) -> SimpleNamespace:
    """Seed one account per role plus an inactive professor."""
    rows = {
        "admin": User(id=generate_ulid(), name="Ada Admin", email="admin@acadlab.test", role="ADMIN"),
        "technician": User(
            id=generate_ulid(), name="Tom Technician", email="tech@acadlab.test", role="TECHNICIAN"
        ),
        "professor": User(
            id=generate_ulid(), name="Paula Professor", email="paula@acadlab.test", role="PROFESSOR"
        ),
        "other_professor": User(
            id=generate_ulid(), name="Otto Professor", email="otto@acadlab.test", role="PROFESSOR"
        ),
        "inactive": User(
            id=generate_ulid(),
            name="Ivo Inactive",
            email="ivo@acadlab.test",
            role="PROFESSOR",
            is_active=False,
        ),
    }
    session = session_factory()
    session.add_all(rows.values())
    session.commit()
    session.close()

    return SimpleNamespace(
        admin=Actor(rows["admin"].id, RoleName.ADMIN),
        technician=Actor(rows["technician"].id, RoleName.TECHNICIAN),
        professor=Actor(rows["professor"].id, RoleName.PROFESSOR),
        other_professor=Actor(rows["other_professor"].id, RoleName.PROFESSOR),
        inactive_id=rows["inactive"].id,
    )


@pytest.fixture
def fetch_reservations(session_factory):
    """Read reservations through a short-lived session, releasing the lock."""

    def _fetch(laboratory_id: str = LAB_ID, include_cancelled: bool = True) -> List[Reservation]:
        session = session_factory()
        try:
            stmt = (
                select(Reservation)
                .where(Reservation.laboratory_id == laboratory_id)
                .order_by(Reservation.start_time)
            )
            if not include_cancelled:
                stmt = stmt.where(Reservation.status != "CANCELLED")
            return list(session.scalars(stmt))
        finally:
            session.close()

    return _fetch


@pytest.fixture
def count_recurrence_groups(session_factory):
    def _count() -> int:
        session = session_factory()
        try:
            return len(list(session.scalars(select(RecurrenceGroup))))
        finally:
            session.close()

    return _count
