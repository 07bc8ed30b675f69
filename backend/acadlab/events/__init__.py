"""Domain events emitted after reservations change."""

from .publisher import EventPublisher, NotificationSink, log_sink
from .reservation_events import ReservationCancelled, ReservationConfirmed

__all__ = [
    "EventPublisher",
    "NotificationSink",
    "ReservationCancelled",
    "ReservationConfirmed",
    "log_sink",
]
