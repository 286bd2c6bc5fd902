# rentshare/core/errors.py
from typing import List


class BookingError(Exception):
    """Base class for booking workflow failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidBookingError(BookingError):
    """Bad dates, bad status or a transition the state machine forbids."""


class BookingPermissionError(BookingError):
    """The acting party may not perform this transition."""

    status_code = 403


class BookingConflictError(BookingError):
    """
    Requested dates collide with confirmed bookings or owner-blocked dates.
    Carries every conflicting date, in range order.
    """

    def __init__(self, message: str, conflict_dates: List[str]):
        super().__init__(message)
        self.conflict_dates = conflict_dates


class StaleAvailabilityError(BookingError):
    """
    The item's availability or the booking's status changed between the
    check and the write.
    """

    status_code = 409

    def __init__(self, item_id: int):
        super().__init__("Booking or availability changed while processing the request, please retry")
        self.item_id = item_id
