# rentshare/services/bookings.py
"""
Booking workflow on top of the availability rules.

Every write that changes which dates are taken (confirming, cancelling a
confirmed booking, blocking or unblocking dates) bumps the item's
``availability_version`` with a conditional UPDATE in the same transaction
as the change itself. The version is captured before availability is read,
so a concurrent writer that slipped in between makes the bump match zero
rows and the whole transaction is rolled back.

Status changes are conditional as well: the new status is written only
while the booking still has the status it was validated in.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.core.errors import (
    BookingConflictError,
    BookingPermissionError,
    InvalidBookingError,
    StaleAvailabilityError,
)
from rentshare.db import crud_bookings, crud_items
from rentshare.db.models import Booking, Item, UnavailableDate
from rentshare.services import availability
from rentshare.services.availability import CANCELLED, CONFIRMED
from rentshare.services.notifications import send_booking_status_notification

logger = logging.getLogger(__name__)


async def load_availability(
    db: AsyncSession,
    item_id: int,
    *,
    exclude_booking_id: Optional[int] = None,
) -> Tuple[List[Booking], List[UnavailableDate]]:
    """
    Confirmed bookings and owner-blocked rows of an item.
    """
    confirmed = await crud_bookings.list_bookings_for_item(
        db, item_id, status=CONFIRMED, exclude_id=exclude_booking_id
    )
    blocked = await crud_items.list_unavailable_dates(db, item_id)
    return confirmed, blocked


async def request_booking(
    db: AsyncSession,
    item: Item,
    *,
    renter_email: str,
    owner_email: str,
    start_date: date,
    end_date: date,
    note: Optional[str] = None,
) -> Booking:
    """
    Create a pending booking. Only confirmed bookings and owner-blocked dates
    block a request; overlapping pending requests are allowed and resolved at
    confirmation time.
    """
    if end_date < start_date:
        raise InvalidBookingError("End date must not be before start date")
    if owner_email != item.owner_email:
        raise InvalidBookingError("Owner does not match item")

    requested = availability.date_range(start_date, end_date)
    confirmed, blocked = await load_availability(db, item.id)
    result = availability.validate_confirmation(
        requested, confirmed, [u.unavailable_date for u in blocked]
    )
    if not result.ok:
        raise BookingConflictError(
            "Some dates are already confirmed or blocked", result.conflict_dates
        )

    total_days = len(requested)
    total_amount = Decimal(total_days) * Decimal(str(item.price or 0))

    booking = await crud_bookings.create_booking(
        db,
        item_id=item.id,
        renter_email=renter_email,
        owner_email=item.owner_email,
        start_date=start_date,
        end_date=end_date,
        total_days=total_days,
        total_amount=total_amount,
        note=note,
    )
    logger.info(
        "booking %s requested for item %s by %s (%s..%s)",
        booking.id, item.id, renter_email, start_date, end_date,
    )
    return booking


def check_permission(
    booking: Booking,
    status: str,
    *,
    user_email: Optional[str],
    owner_email: Optional[str],
) -> None:
    if status == CANCELLED:
        is_requester = user_email is not None and booking.renter_email == user_email
        is_owner = owner_email is not None and booking.owner_email == owner_email
        if not is_requester and not is_owner:
            raise BookingPermissionError("Unauthorized to cancel this booking")
        if not availability.can_transition(booking.status, status):
            raise InvalidBookingError("Only pending or confirmed bookings can be cancelled")
        return

    if owner_email is None or booking.owner_email != owner_email:
        raise BookingPermissionError("Only the owner can approve or reject bookings")
    if not availability.can_transition(booking.status, status):
        raise InvalidBookingError("Only pending bookings can be approved or rejected")


async def check_transition(
    db: AsyncSession,
    item: Item,
    booking: Booking,
    status: str,
    *,
    user_email: Optional[str] = None,
    owner_email: Optional[str] = None,
) -> int:
    """
    Validate a status change without writing anything. Returns the item's
    availability version the change was validated against.
    """
    version = item.availability_version
    check_permission(booking, status, user_email=user_email, owner_email=owner_email)

    if status == CONFIRMED:
        confirmed, blocked = await load_availability(
            db, item.id, exclude_booking_id=booking.id
        )
        result = availability.validate_confirmation(
            availability.date_range(booking.start_date, booking.end_date),
            confirmed,
            [u.unavailable_date for u in blocked],
        )
        if not result.ok:
            raise BookingConflictError(
                "Some dates are no longer available", result.conflict_dates
            )
    return version


async def apply_transition(
    db: AsyncSession,
    item: Item,
    booking: Booking,
    status: str,
    expected_version: int,
) -> Booking:
    """
    Write a status change validated by check_transition. Status and the
    availability version are committed together or not at all.

    The status is only written if the booking still has the status it was
    validated in, so a booking that another request already rejected or
    cancelled is never moved again.
    """
    previous = booking.status
    item_id, booking_id = item.id, booking.id
    changes_dates = status == CONFIRMED or (status == CANCELLED and previous == CONFIRMED)

    if changes_dates:
        if not await crud_items.bump_availability_version(db, item_id, expected_version):
            logger.warning(
                "stale availability for item %s while moving booking %s to %s",
                item_id, booking_id, status,
            )
            await db.rollback()
            raise StaleAvailabilityError(item_id)

    if not await crud_bookings.update_status_if(db, booking_id, previous, status):
        logger.warning(
            "booking %s left %s before it could move to %s",
            booking_id, previous, status,
        )
        await db.rollback()
        raise StaleAvailabilityError(item_id)

    await db.commit()
    await db.refresh(booking)
    if changes_dates:
        await db.refresh(item)

    logger.info("booking %s: %s -> %s", booking_id, previous, status)
    return booking


async def change_status(
    db: AsyncSession,
    item: Item,
    booking: Booking,
    status: str,
    *,
    user_email: Optional[str] = None,
    owner_email: Optional[str] = None,
) -> Booking:
    version = await check_transition(
        db, item, booking, status, user_email=user_email, owner_email=owner_email
    )
    booking = await apply_transition(db, item, booking, status, version)
    send_booking_status_notification(booking, item.title, status, user_email or owner_email)
    return booking


# --- owner-blocked dates ---

async def block_dates(
    db: AsyncSession,
    item: Item,
    dates: Iterable[date],
    *,
    is_recurring: bool = False,
    recurring_type: Optional[str] = None,
) -> List[UnavailableDate]:
    """
    Owner blocks dates. Dates already taken by a confirmed booking cannot be
    blocked; the owner has to cancel the booking first.
    """
    item_id, version = item.id, item.availability_version
    dates = sorted(set(dates))

    confirmed = await crud_bookings.list_bookings_for_item(db, item_id, status=CONFIRMED)
    taken = availability.confirmed_dates(confirmed)
    conflicts = [d.isoformat() for d in dates if d.isoformat() in taken]
    if conflicts:
        raise BookingConflictError("Some dates are already booked", conflicts)

    reason = f"Recurring {recurring_type} unavailability" if is_recurring else "Owner unavailable"
    try:
        added = await crud_items.add_unavailable_dates(
            db,
            item_id,
            dates,
            reason=reason,
            is_recurring=is_recurring,
            recurring_type=recurring_type,
        )
        if not await crud_items.bump_availability_version(db, item_id, version):
            await db.rollback()
            raise StaleAvailabilityError(item_id)
        await db.commit()
    except IntegrityError:
        # another request blocked one of the dates after we looked
        logger.warning("concurrent block of the same date on item %s", item_id)
        await db.rollback()
        raise StaleAvailabilityError(item_id)
    for row in added:
        await db.refresh(row)
    await db.refresh(item)
    logger.info("item %s: %d date(s) blocked by owner", item_id, len(added))
    return added


async def unblock_dates(db: AsyncSession, item: Item, dates: Iterable[date]) -> int:
    item_id, version = item.id, item.availability_version
    removed = await crud_items.remove_unavailable_dates(db, item_id, dates)
    if not await crud_items.bump_availability_version(db, item_id, version):
        await db.rollback()
        raise StaleAvailabilityError(item_id)
    await db.commit()
    await db.refresh(item)
    logger.info("item %s: %d blocked date(s) removed", item_id, removed)
    return removed


def unavailable_entries(
    item_id: int,
    blocked: Iterable[UnavailableDate],
    confirmed: Iterable[Booking],
) -> List[dict]:
    """
    Owner-blocked dates followed by dates taken by confirmed bookings that
    are not also blocked, each sorted by date.
    """
    entries = []
    blocked_days = set()
    for u in blocked:
        blocked_days.add(u.unavailable_date.isoformat())
        entries.append({
            "id": f"{item_id}-{u.unavailable_date.isoformat()}-owner",
            "item_id": item_id,
            "unavailable_date": u.unavailable_date,
            "reason": u.reason or "Owner unavailable",
            "source": "owner",
            "is_recurring": u.is_recurring,
            "recurring_type": u.recurring_type,
        })
    for day in sorted(availability.confirmed_dates(confirmed) - blocked_days):
        entries.append({
            "id": f"{item_id}-{day}-booking",
            "item_id": item_id,
            "unavailable_date": date.fromisoformat(day),
            "reason": "Booked",
            "source": "booking",
        })
    return entries
