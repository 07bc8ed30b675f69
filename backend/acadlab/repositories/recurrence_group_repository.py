"""Recurrence group persistence. Groups are written once and never updated."""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.records import RecurrenceFrequency, RecurrenceGroupRecord
from ..models.reservation import RecurrenceGroup
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class RecurrenceGroupRepository(BaseRepository[RecurrenceGroup]):
    def __init__(self, db: Session):
        super().__init__(db, RecurrenceGroup)

    def get_record(self, recurrence_id: str) -> Optional[RecurrenceGroupRecord]:
        group = self.get_by_id(recurrence_id)
        return group.to_record() if group else None

    def create(  # type: ignore[override]
        self,
        *,
        laboratory_id: str,
        created_by_id: str,
        week_day: int,
        start_date: datetime,
        end_date: datetime,
        created_at: datetime,
        subject: Optional[str] = None,
    ) -> RecurrenceGroupRecord:
        """Insert a weekly series header. Does not commit."""
        group = super().create(
            laboratory_id=laboratory_id,
            created_by_id=created_by_id,
            frequency=RecurrenceFrequency.WEEKLY.value,
            interval=1,
            week_day=week_day,
            subject=subject,
            start_date=start_date,
            end_date=end_date,
            created_at=created_at,
        )
        return group.to_record()
