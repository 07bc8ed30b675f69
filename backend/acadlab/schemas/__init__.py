from .reservation import (
    BookingResult,
    CancellationResult,
    CancelReservationRequest,
    ReservationCreate,
)

__all__ = [
    "BookingResult",
    "CancellationResult",
    "CancelReservationRequest",
    "ReservationCreate",
]
