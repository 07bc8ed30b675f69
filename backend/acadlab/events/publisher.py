"""Event publisher - hands domain events to the notification collaborator."""
from datetime import datetime
import logging
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

NotificationSink = Callable[[str, Dict[str, Any]], None]


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


def log_sink(event_type: str, payload: Dict[str, Any]) -> None:
    """Default sink: record the event and deliver nothing."""
    logger.info("Event %s: %s", event_type, payload)


class EventPublisher:
    """
    Publishes domain events after the transaction that produced them commits.

    Delivery failures are logged and never undo the committed change.
    """

    def __init__(self, sink: Optional[NotificationSink] = None):
        self.sink = sink or log_sink

    def publish(self, event: Event) -> None:
        event_type = type(event).__name__
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for transport
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        try:
            self.sink(event_type, payload)
        except Exception:
            logger.exception("Notification sink failed for %s", event_type)
