"""ReservationRepository against a file-backed SQLite database."""

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from acadlab.core.exceptions import RepositoryException
from acadlab.domain.records import ReservationStatus
from acadlab.repositories import RepositoryFactory
from tests.utils.scheduling import LAB_ID, OTHER_LAB_ID, utc

pytestmark = pytest.mark.integration

CREATED_AT = utc(2025, 3, 1, 12)


@pytest.fixture
def repository(db):
    return RepositoryFactory.create_reservation_repository(db)


@pytest.fixture
def owner_id(users):
    return users.professor.id


def _create(repository, owner_id, start, end, laboratory_id=LAB_ID, recurrence_id=None):
    return repository.create(
        laboratory_id=laboratory_id,
        created_by_id=owner_id,
        start_time=start,
        end_time=end,
        created_at=CREATED_AT,
        recurrence_id=recurrence_id,
    )


def test_create_returns_confirmed_record(db, repository, owner_id):
    record = _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11, 40))
    db.commit()

    assert record.status == ReservationStatus.CONFIRMED
    assert record.start_time == utc(2025, 3, 10, 10)
    assert record.start_time.tzinfo is not None
    assert repository.get_record(record.id) == record


def test_window_query_orders_and_filters(db, repository, owner_id):
    late = _create(repository, owner_id, utc(2025, 3, 10, 16), utc(2025, 3, 10, 17))
    early = _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11))
    _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11), OTHER_LAB_ID)
    cancelled = _create(repository, owner_id, utc(2025, 3, 10, 13), utc(2025, 3, 10, 14))
    # Ends exactly at the window start: not included.
    _create(repository, owner_id, utc(2025, 3, 10, 2), utc(2025, 3, 10, 3))
    repository.cancel_one(cancelled.id, None, CREATED_AT)
    db.commit()

    found = repository.find_active_in_window(LAB_ID, utc(2025, 3, 10, 3), utc(2025, 3, 11, 3))
    assert [record.id for record in found] == [early.id, late.id]


def test_find_first_conflict(db, repository, owner_id):
    existing = _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11, 40))
    db.commit()

    assert repository.find_first_conflict(LAB_ID, utc(2025, 3, 10, 11), utc(2025, 3, 10, 12)).id == existing.id
    assert repository.find_first_conflict(LAB_ID, utc(2025, 3, 10, 11, 40), utc(2025, 3, 10, 12)) is None
    assert repository.find_first_conflict(OTHER_LAB_ID, utc(2025, 3, 10, 10), utc(2025, 3, 10, 12)) is None
    assert (
        repository.find_first_conflict(LAB_ID, utc(2025, 3, 10, 11), utc(2025, 3, 10, 12), lock=True).id
        == existing.id
    )


def test_cancel_one_is_conditional(db, repository, owner_id):
    record = _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11))
    db.commit()

    assert repository.cancel_one(record.id, "Equipment failure", utc(2025, 3, 5)) == 1
    assert repository.cancel_one(record.id, "Second attempt", utc(2025, 3, 6)) == 0
    db.commit()

    cancelled = repository.get_record(record.id)
    assert cancelled.status == ReservationStatus.CANCELLED
    assert cancelled.cancellation_reason == "Equipment failure"
    assert cancelled.cancelled_at == utc(2025, 3, 5)


def test_cancel_series_from(db, repository, owner_id):
    group = RepositoryFactory.create_recurrence_group_repository(db).create(
        laboratory_id=LAB_ID,
        created_by_id=owner_id,
        week_day=1,
        start_date=utc(2025, 3, 10, 10),
        end_date=utc(2025, 3, 31, 11),
        created_at=CREATED_AT,
    )
    weeks = [
        _create(repository, owner_id, utc(2025, 3, day, 10), utc(2025, 3, day, 11), recurrence_id=group.id)
        for day in (10, 17, 24, 31)
    ]
    repository.cancel_one(weeks[3].id, None, CREATED_AT)
    db.commit()

    cancelled_ids = repository.cancel_series_from(group.id, weeks[1].start_time, "Course ended", utc(2025, 3, 12))
    db.commit()

    assert cancelled_ids == [weeks[1].id, weeks[2].id]
    statuses = [record.status for record in repository.list_series(group.id)]
    assert statuses == [
        ReservationStatus.CONFIRMED,
        ReservationStatus.CANCELLED,
        ReservationStatus.CANCELLED,
        ReservationStatus.CANCELLED,
    ]
    assert repository.cancel_series_from(group.id, weeks[1].start_time, None, utc(2025, 3, 13)) == []


def test_unique_active_start_is_enforced(db, repository, owner_id):
    _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11))
    db.commit()

    with pytest.raises(RepositoryException) as exc_info:
        _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 10, 50))
    assert isinstance(exc_info.value.__cause__, IntegrityError)
    db.rollback()


def test_cancelled_rows_free_the_start(db, repository, owner_id):
    first = _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11))
    repository.cancel_one(first.id, None, CREATED_AT)
    db.commit()

    second = _create(repository, owner_id, utc(2025, 3, 10, 10), utc(2025, 3, 10, 11))
    db.commit()
    assert second.status == ReservationStatus.CONFIRMED


def test_naive_datetimes_rejected(db, repository, owner_id):
    with pytest.raises(RepositoryException):
        _create(repository, owner_id, datetime(2025, 3, 10, 10), datetime(2025, 3, 10, 11))
    db.rollback()


def test_empty_window_returns_nothing(repository):
    assert repository.find_active_in_window(LAB_ID, utc(2025, 3, 10), utc(2025, 3, 11)) == []
