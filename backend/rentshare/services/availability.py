# rentshare/services/availability.py
"""
Per-date availability of an item and the booking status state machine.

Everything here is pure: callers fetch bookings and blocked dates from the
database and pass them in. Bookings only need ``start_date``, ``end_date``,
``status`` and ``renter_email`` attributes.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set, Union

DateLike = Union[date, str]

# Booking statuses
PENDING = "pending"
CONFIRMED = "confirmed"
REJECTED = "rejected"
CANCELLED = "cancelled"

BOOKING_STATUSES = (PENDING, CONFIRMED, REJECTED, CANCELLED)
TERMINAL_STATUSES = (REJECTED, CANCELLED)

# status -> statuses reachable from it
TRANSITIONS = {
    PENDING: (CONFIRMED, REJECTED, CANCELLED),
    CONFIRMED: (CANCELLED,),
    REJECTED: (),
    CANCELLED: (),
}

# Calendar date states
PAST = "past"
BOOKED = "booked"
OWNER_BLOCKED = "owner-blocked"
AVAILABLE = "available"


@dataclass
class ValidationResult:
    ok: bool
    conflict_dates: List[str] = field(default_factory=list)


def to_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def date_range(start: DateLike, end: DateLike) -> List[str]:
    """
    ISO dates from start to end, both inclusive. Empty when end < start.
    """
    current = to_date(start)
    last = to_date(end)
    days: List[str] = []
    while current <= last:
        days.append(current.isoformat())
        current += timedelta(days=1)
    return days


def covers(booking, day: DateLike) -> bool:
    d = to_date(day)
    return to_date(booking.start_date) <= d <= to_date(booking.end_date)


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, ())


def classify(
    day: DateLike,
    bookings: Iterable,
    owner_blocked_dates: Iterable[DateLike],
    viewer_email: Optional[str] = None,
    viewer_is_owner: bool = False,
    today: Optional[date] = None,
) -> str:
    """
    Status of a single date as seen by one viewer; first match wins:
    past, booked, pending (owner sees every pending request, a renter only
    their own), owner-blocked, available.
    """
    d = to_date(day)
    today = today or date.today()
    if d < today:
        return PAST

    bookings = list(bookings)
    covering = [b for b in bookings if covers(b, d)]

    if any(b.status == CONFIRMED for b in covering):
        return BOOKED

    pending = [b for b in covering if b.status == PENDING]
    if pending:
        if viewer_is_owner:
            return PENDING
        if viewer_email and any(b.renter_email == viewer_email for b in pending):
            return PENDING

    blocked = {to_date(x) for x in owner_blocked_dates}
    if d in blocked:
        return OWNER_BLOCKED

    return AVAILABLE


def visible_bookings(
    bookings: Iterable,
    viewer_email: Optional[str] = None,
    viewer_is_owner: bool = False,
) -> List:
    """
    Owner sees every booking, a renter sees their own plus confirmed ones,
    anonymous viewers see confirmed ones only.
    """
    if viewer_is_owner:
        return list(bookings)
    if viewer_email:
        return [
            b for b in bookings
            if b.renter_email == viewer_email or b.status == CONFIRMED
        ]
    return [b for b in bookings if b.status == CONFIRMED]


def confirmed_dates(bookings: Iterable) -> Set[str]:
    """
    Dates covered by confirmed bookings, derived from the booking rows.
    """
    dates: Set[str] = set()
    for b in bookings:
        if b.status == CONFIRMED:
            dates.update(date_range(b.start_date, b.end_date))
    return dates


def validate_confirmation(
    proposed_range: Iterable[DateLike],
    existing_confirmed_bookings: Iterable,
    owner_blocked_dates: Iterable[DateLike],
) -> ValidationResult:
    """
    Check every date of the proposed range against owner-blocked dates and
    the given confirmed bookings (the booking being confirmed must not be
    among them). Returns all conflicting dates, in range order.
    """
    blocked = {to_date(x).isoformat() for x in owner_blocked_dates}
    taken = confirmed_dates(
        b for b in existing_confirmed_bookings if b.status == CONFIRMED
    )

    conflicts = []
    for day in proposed_range:
        iso = to_date(day).isoformat()
        if iso in blocked or iso in taken:
            conflicts.append(iso)

    if conflicts:
        return ValidationResult(ok=False, conflict_dates=conflicts)
    return ValidationResult(ok=True)
