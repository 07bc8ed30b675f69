# backend/acadlab/services/cancellation_service.py
"""
Cancellation Service for the AcadLab scheduling engine.

Cancelling never deletes rows: reservations move to CANCELLED with a reason
and timestamp. Cancelling something that is already cancelled succeeds
without touching it.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    ForbiddenException,
    ReservationNotFoundException,
    ValidationException,
)
from ..domain.records import ReservationRecord
from ..events.publisher import EventPublisher
from ..events.reservation_events import ReservationCancelled
from ..principal import Actor
from ..schemas.reservation import CancellationResult, CancelReservationRequest
from .base import BaseService

logger = logging.getLogger(__name__)


class CancellationService(BaseService):
    """Service cancelling single reservations or the rest of a weekly series."""

    def __init__(
        self,
        db: Session,
        event_publisher: Optional[EventPublisher] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.config = config or default_settings
        self.event_publisher = event_publisher or EventPublisher()

    @BaseService.measure_operation("cancel_reservation")
    def cancel_reservation(
        self, actor: Actor, request: CancelReservationRequest, now: datetime
    ) -> CancellationResult:
        """
        Cancel a reservation, or it and every later occurrence of its series.

        Args:
            actor: Authenticated caller; must own the reservation or be a manager
            request: Target reservation, optional reason and series flag
            now: Cancellation timestamp

        Returns:
            CancellationResult listing the ids that changed

        Raises:
            ReservationNotFoundException: Unknown reservation id
            ForbiddenException: Actor is neither the owner nor a manager
            ValidationException: Reason longer than the configured maximum
        """
        self.log_operation(
            "cancel_reservation",
            actor_id=actor.id,
            reservation_id=request.reservation_id,
            cancel_series=request.cancel_series,
        )
        reason = self._normalize_reason(request.reason)

        with self.transaction() as uow:
            reservation = uow.reservations.get_record(request.reservation_id)
            if reservation is None:
                raise ReservationNotFoundException(request.reservation_id)
            self._ensure_can_cancel(actor, reservation)

            if reservation.is_cancelled:
                self.logger.info(f"Reservation {reservation.id} already cancelled; nothing to do")
                return CancellationResult(reservation_id=reservation.id, already_cancelled=True)

            series = bool(request.cancel_series and reservation.recurrence_id)
            if series:
                cancelled_ids: List[str] = uow.reservations.cancel_series_from(
                    reservation.recurrence_id, reservation.start_time, reason, now
                )
                cancelled = set(cancelled_ids)
                window_end = max(
                    (
                        occurrence.end_time
                        for occurrence in uow.reservations.list_series(reservation.recurrence_id)
                        if occurrence.id in cancelled
                    ),
                    default=reservation.end_time,
                )
            else:
                changed = uow.reservations.cancel_one(reservation.id, reason, now)
                cancelled_ids = [reservation.id] if changed else []
                window_end = reservation.end_time

        if not cancelled_ids:
            # Lost a race with another cancellation between read and update.
            return CancellationResult(reservation_id=reservation.id, already_cancelled=True)

        self.logger.info(
            f"Cancelled {len(cancelled_ids)} reservation(s) starting with {reservation.id}"
        )
        self._publish_cancellation(
            actor, reservation, cancelled_ids, window_end, series, reason, now
        )
        return CancellationResult(
            reservation_id=reservation.id,
            cancelled_ids=cancelled_ids,
            series=series,
        )

    def _normalize_reason(self, reason: Optional[str]) -> Optional[str]:
        if reason is None:
            return None
        reason = reason.strip()
        if not reason:
            return None
        if len(reason) > self.config.cancel_reason_max_length:
            raise ValidationException(
                f"Cancellation reason must have at most "
                f"{self.config.cancel_reason_max_length} characters",
                code="CANCEL_REASON_TOO_LONG",
            )
        return reason

    @staticmethod
    def _ensure_can_cancel(actor: Actor, reservation: ReservationRecord) -> None:
        if actor.is_manager or reservation.created_by_id == actor.id:
            return
        raise ForbiddenException("You can only cancel your own reservations")

    def _publish_cancellation(
        self,
        actor: Actor,
        reservation: ReservationRecord,
        cancelled_ids: List[str],
        window_end: datetime,
        series: bool,
        reason: Optional[str],
        now: datetime,
    ) -> None:
        self.event_publisher.publish(
            ReservationCancelled(
                reservation_ids=cancelled_ids,
                laboratory_id=reservation.laboratory_id,
                start_time=reservation.start_time,
                end_time=window_end,
                actor_id=actor.id,
                cancelled_at=now,
                series=series,
                reason=reason,
            )
        )
