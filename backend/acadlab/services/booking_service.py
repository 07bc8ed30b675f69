# backend/acadlab/services/booking_service.py
"""
Booking Service for the AcadLab scheduling engine.

Validates a slot selection and creates one reservation, or a weekly series of
them, inside a single unit of work. Either every occurrence is committed or
none is.
"""

from datetime import date, datetime, timedelta, timezone
import logging
from typing import List, Optional, Sequence, Set, Tuple, cast

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.constants import DAYS_PER_WEEK
from ..core.exceptions import (
    AcademicPeriodNotFoundException,
    CrossDayBookingException,
    DateOutsideAcademicPeriodException,
    DuplicateSlotException,
    ForbiddenException,
    InvalidSlotException,
    NonContiguousSelectionException,
    NonTeachingDayException,
    OwnerNotFoundException,
    RepositoryException,
    SlotConflictException,
    SlotInPastException,
)
from ..database.unit_of_work import UnitOfWork
from ..domain.records import RecurrenceGroupRecord, ReservationRecord
from ..domain.schedule import Slot
from ..domain.time_rules import SystemRules
from ..events.publisher import EventPublisher
from ..events.reservation_events import ReservationConfirmed
from ..principal import Actor
from ..schemas.reservation import BookingResult, ReservationCreate
from .base import BaseService
from .conflict_checker import ConflictChecker
from .slot_generator import build_daily_schedule, find_non_teaching_rule
from .system_rules_service import SystemRulesProvider, provider_from_settings
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)

# One retry after a unique-index violation, then the loser gets a conflict.
MAX_PERSIST_ATTEMPTS = 2


def parse_slot_id(slot_id: str) -> datetime:
    """
    Parse a slot identifier into an aware UTC instant.

    Raises:
        InvalidSlotException: For anything that is not an ISO-8601 instant
            carrying an explicit offset
    """
    if not isinstance(slot_id, str) or not slot_id.strip():
        raise InvalidSlotException(slot_id)
    value = slot_id.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise InvalidSlotException(slot_id) from exc
    if parsed.tzinfo is None:
        raise InvalidSlotException(slot_id, "Slot identifiers must carry a UTC offset")
    return parsed.astimezone(timezone.utc)


def _is_integrity_violation(exc: Exception) -> bool:
    return isinstance(exc, IntegrityError) or isinstance(exc.__cause__, IntegrityError)


class BookingService(BaseService):
    """
    Service creating laboratory reservations.

    Validation order is fixed so callers always see the same error for the
    same request: date and slot format, ownership, recurrence, teaching days,
    then the slot selection against the generated schedule.
    """

    def __init__(
        self,
        db: Session,
        rules_provider: Optional[SystemRulesProvider] = None,
        event_publisher: Optional[EventPublisher] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.config = config or default_settings
        self.rules_provider = rules_provider or provider_from_settings(self.config)
        self.event_publisher = event_publisher or EventPublisher()

    @BaseService.measure_operation("create_reservation")
    def create_reservation(
        self, actor: Actor, data: ReservationCreate, now: datetime
    ) -> BookingResult:
        """
        Create a reservation (or weekly series) for contiguous slots.

        Args:
            actor: Authenticated caller
            data: Booking request
            now: Current instant (aware); slots ending at or before it are past

        Returns:
            BookingResult with the committed reservations and recurrence group

        Raises:
            ValidationException: Malformed date or slots, cross-day, duplicate
                or non-contiguous selection
            ForbiddenException: Delegation or academic-period booking by a
                base-tier actor
            NotFoundException: Unknown owner or academic period
            BusinessRuleException: Date outside the academic period, a
                non-teaching day or a past slot
            SlotConflictException: Any occurrence overlaps an active reservation
        """
        self.log_operation(
            "create_reservation",
            actor_id=actor.id,
            laboratory_id=data.laboratory_id,
            requested_date=data.date,
            slot_count=len(data.slot_ids),
        )

        rules = self.rules_provider.get_rules()
        time_zone = rules.time_zone
        day = TimezoneService.parse_iso_date(data.date)
        slot_starts = self._parse_selection(data, time_zone)

        result: Optional[BookingResult] = None
        for attempt in range(1, MAX_PERSIST_ATTEMPTS + 1):
            try:
                with self.transaction() as uow:
                    result = self._book(uow, actor, data, day, slot_starts, rules, now)
                break
            except (IntegrityError, RepositoryException) as exc:
                if not _is_integrity_violation(exc):
                    raise
                if attempt == MAX_PERSIST_ATTEMPTS:
                    self.logger.warning(
                        f"Reservation for lab {data.laboratory_id} on {data.date} lost a "
                        f"concurrent insert twice; reporting conflict"
                    )
                    raise SlotConflictException(
                        data.date,
                        details={"laboratory_id": data.laboratory_id},
                    ) from exc
                self.logger.info(
                    f"Unique constraint hit for lab {data.laboratory_id} on {data.date}; retrying"
                )

        booking = cast(BookingResult, result)
        self._publish_confirmation(actor, data, booking)
        return booking

    # Validation before touching the database

    def _parse_selection(self, data: ReservationCreate, time_zone: str) -> List[datetime]:
        parsed = [(slot_id, parse_slot_id(slot_id)) for slot_id in data.slot_ids]

        for _, start in parsed:
            slot_date = TimezoneService.iso_date_in_timezone(start, time_zone)
            if slot_date != data.date:
                raise CrossDayBookingException(data.date, slot_date)

        seen: Set[datetime] = set()
        for slot_id, start in parsed:
            if start in seen:
                raise DuplicateSlotException(slot_id)
            seen.add(start)

        return sorted(seen)

    # Unit of work body

    def _book(
        self,
        uow: UnitOfWork,
        actor: Actor,
        data: ReservationCreate,
        day: date,
        slot_starts: Sequence[datetime],
        rules: SystemRules,
        now: datetime,
    ) -> BookingResult:
        owner_id = self._resolve_owner(uow, actor, data.owner_id)
        occurrences = self._resolve_occurrences(actor, data, day, rules)
        self._ensure_teaching_days(day, occurrences, rules)
        start, end = self._resolve_span(uow, data, slot_starts, rules, now)

        time_zone = rules.time_zone
        windows = [
            (
                TimezoneService.shift_local_days(start, index * DAYS_PER_WEEK, time_zone),
                TimezoneService.shift_local_days(end, index * DAYS_PER_WEEK, time_zone),
            )
            for index in range(occurrences)
        ]

        checker = ConflictChecker(uow.session, uow.reservations)
        for window_start, window_end in windows:
            conflict = checker.find_conflict(data.laboratory_id, window_start, window_end)
            if conflict is not None:
                conflict_date = TimezoneService.iso_date_in_timezone(window_start, time_zone)
                raise SlotConflictException(
                    conflict_date,
                    details={
                        "laboratory_id": data.laboratory_id,
                        "conflicting_reservation_id": conflict.id,
                    },
                )

        group: Optional[RecurrenceGroupRecord] = None
        if occurrences > 1:
            group = uow.recurrence_groups.create(
                laboratory_id=data.laboratory_id,
                created_by_id=owner_id,
                week_day=TimezoneService.weekday_index(day),
                start_date=windows[0][0],
                end_date=windows[-1][1],
                created_at=now,
                subject=data.subject,
            )

        reservations: List[ReservationRecord] = [
            uow.reservations.create(
                laboratory_id=data.laboratory_id,
                created_by_id=owner_id,
                start_time=window_start,
                end_time=window_end,
                created_at=now,
                subject=data.subject,
                recurrence_id=group.id if group else None,
            )
            for window_start, window_end in windows
        ]

        self.logger.info(
            f"Booked {len(reservations)} reservation(s) for lab {data.laboratory_id} "
            f"starting {start.isoformat()}"
        )
        return BookingResult(reservations=reservations, recurrence_group=group)

    def _resolve_owner(self, uow: UnitOfWork, actor: Actor, owner_id: Optional[str]) -> str:
        if not owner_id or owner_id == actor.id:
            return actor.id
        if not actor.is_manager:
            raise ForbiddenException("Only administrators and technicians can book for others")
        if uow.users.get_active_user(owner_id) is None:
            raise OwnerNotFoundException(owner_id)
        return owner_id

    def _resolve_occurrences(
        self, actor: Actor, data: ReservationCreate, day: date, rules: SystemRules
    ) -> int:
        max_occurrences = self.config.max_occurrences
        if data.academic_period_id:
            if not actor.is_manager:
                raise ForbiddenException(
                    "Only administrators and technicians can book a whole academic period"
                )
            academic_period = rules.get_academic_period(data.academic_period_id)
            if academic_period is None:
                raise AcademicPeriodNotFoundException(data.academic_period_id)
            if not academic_period.contains(day):
                raise DateOutsideAcademicPeriodException(
                    data.date,
                    academic_period.start_date.isoformat(),
                    academic_period.end_date.isoformat(),
                )
            weeks = (academic_period.end_date - day).days // DAYS_PER_WEEK
            return min(weeks + 1, max_occurrences)

        if not actor.is_manager:
            return 1
        return max(1, min(data.occurrences, max_occurrences))

    def _ensure_teaching_days(self, day: date, occurrences: int, rules: SystemRules) -> None:
        for index in range(occurrences):
            occurrence_day = day + timedelta(days=index * DAYS_PER_WEEK)
            rule = find_non_teaching_rule(occurrence_day, rules.non_teaching_days)
            if rule is not None:
                raise NonTeachingDayException(occurrence_day.isoformat(), rule.description)

    def _resolve_span(
        self,
        uow: UnitOfWork,
        data: ReservationCreate,
        slot_starts: Sequence[datetime],
        rules: SystemRules,
        now: datetime,
    ) -> Tuple[datetime, datetime]:
        """Match the selection against the generated schedule and return its span."""
        time_zone = rules.time_zone
        existing = uow.reservations.find_active_in_window(
            data.laboratory_id,
            TimezoneService.get_start_of_day(data.date, time_zone),
            TimezoneService.get_end_of_day(data.date, time_zone),
        )
        schedule = build_daily_schedule(data.date, rules, existing, now)

        selected: List[Slot] = []
        for start in slot_starts:
            slot = schedule.find_slot(start)
            if slot is None:
                raise InvalidSlotException(
                    start.isoformat(), "The selected slot is not part of this day's schedule"
                )
            if slot.is_past:
                raise SlotInPastException(slot.id)
            if slot.is_occupied:
                raise SlotConflictException(
                    data.date,
                    details={
                        "laboratory_id": data.laboratory_id,
                        "slot_id": slot.id,
                    },
                )
            selected.append(slot)

        first, last = selected[0], selected[-1]
        selected_ids = {slot.id for slot in selected}
        missing = [
            slot.id
            for slot in sorted(schedule.all_slots(), key=lambda candidate: candidate.start)
            if slot.start >= first.start and slot.end <= last.end and slot.id not in selected_ids
        ]
        if missing:
            raise NonContiguousSelectionException(missing)

        return first.start, last.end

    def _publish_confirmation(
        self, actor: Actor, data: ReservationCreate, result: BookingResult
    ) -> None:
        first = result.reservations[0]
        self.event_publisher.publish(
            ReservationConfirmed(
                laboratory_id=data.laboratory_id,
                start_time=first.start_time,
                end_time=first.end_time,
                actor_id=actor.id,
                owner_id=first.created_by_id,
                occurrences=len(result.reservations),
                reservation_ids=result.reservation_ids,
                recurrence_id=result.recurrence_group.id if result.recurrence_group else None,
                subject=data.subject,
            )
        )
