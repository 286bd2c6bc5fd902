"""
Two owners' sessions acting on the same item at once. Both validate against
the same availability snapshot; only the first write may land.
"""
from datetime import date

import pytest

from rentshare.core.errors import BookingConflictError, StaleAvailabilityError
from rentshare.db import crud_bookings, crud_items
from rentshare.services.bookings import (
    apply_transition,
    block_dates,
    check_transition,
    request_booking,
)

OWNER = "owner@example.com"


async def seed(session_factory):
    async with session_factory() as db:
        item = await crud_items.create_item(
            db,
            owner_email=OWNER,
            title="Kayak",
            category="sports",
            price=40,
            location="Pune",
        )
        a = await request_booking(
            db, item,
            renter_email="a@example.com", owner_email=OWNER,
            start_date=date(2030, 5, 1), end_date=date(2030, 5, 3),
        )
        b = await request_booking(
            db, item,
            renter_email="b@example.com", owner_email=OWNER,
            start_date=date(2030, 5, 3), end_date=date(2030, 5, 5),
        )
        return item.id, a.id, b.id


@pytest.mark.anyio
async def test_overlapping_confirmations_only_one_lands(session_factory):
    item_id, a_id, b_id = await seed(session_factory)

    async with session_factory() as first, session_factory() as second:
        item_1 = await crud_items.get_item(first, item_id)
        item_2 = await crud_items.get_item(second, item_id)
        booking_a = await crud_bookings.get_booking(first, a_id, item_id)
        booking_b = await crud_bookings.get_booking(second, b_id, item_id)

        # both checks pass: neither booking is confirmed yet
        version_a = await check_transition(first, item_1, booking_a, "confirmed", owner_email=OWNER)
        version_b = await check_transition(second, item_2, booking_b, "confirmed", owner_email=OWNER)
        assert version_a == version_b == 0

        await apply_transition(first, item_1, booking_a, "confirmed", version_a)
        with pytest.raises(StaleAvailabilityError):
            await apply_transition(second, item_2, booking_b, "confirmed", version_b)

    async with session_factory() as db:
        item = await crud_items.get_item(db, item_id)
        assert item.availability_version == 1
        assert (await crud_bookings.get_booking(db, a_id, item_id)).status == "confirmed"
        booking_b = await crud_bookings.get_booking(db, b_id, item_id)
        assert booking_b.status == "pending"

        # a retry sees the new state and reports the overlap
        with pytest.raises(BookingConflictError) as exc:
            await check_transition(db, item, booking_b, "confirmed", owner_email=OWNER)
        assert exc.value.conflict_dates == ["2030-05-03"]


@pytest.mark.anyio
async def test_confirmation_after_concurrent_block_is_rejected(session_factory):
    item_id, a_id, _ = await seed(session_factory)

    async with session_factory() as owner_view, session_factory() as calendar_edit:
        item_1 = await crud_items.get_item(owner_view, item_id)
        booking_a = await crud_bookings.get_booking(owner_view, a_id, item_id)
        version = await check_transition(owner_view, item_1, booking_a, "confirmed", owner_email=OWNER)

        item_2 = await crud_items.get_item(calendar_edit, item_id)
        await block_dates(calendar_edit, item_2, [date(2030, 5, 2)])

        with pytest.raises(StaleAvailabilityError):
            await apply_transition(owner_view, item_1, booking_a, "confirmed", version)

    async with session_factory() as db:
        booking_a = await crud_bookings.get_booking(db, a_id, item_id)
        assert booking_a.status == "pending"


async def confirm_after_concurrent(session_factory, item_id, booking_id, status, **actor):
    """
    Validate a confirmation in one session while another session moves the
    same booking to status and commits first.
    """
    async with session_factory() as owner_view, session_factory() as other:
        item_1 = await crud_items.get_item(owner_view, item_id)
        booking_1 = await crud_bookings.get_booking(owner_view, booking_id, item_id)
        version = await check_transition(owner_view, item_1, booking_1, "confirmed", owner_email=OWNER)

        item_2 = await crud_items.get_item(other, item_id)
        booking_2 = await crud_bookings.get_booking(other, booking_id, item_id)
        other_version = await check_transition(other, item_2, booking_2, status, **actor)
        await apply_transition(other, item_2, booking_2, status, other_version)

        with pytest.raises(StaleAvailabilityError):
            await apply_transition(owner_view, item_1, booking_1, "confirmed", version)

    async with session_factory() as db:
        item = await crud_items.get_item(db, item_id)
        booking = await crud_bookings.get_booking(db, booking_id, item_id)
        return item, booking


@pytest.mark.anyio
async def test_rejected_booking_is_not_confirmed_later(session_factory):
    item_id, a_id, _ = await seed(session_factory)

    item, booking = await confirm_after_concurrent(
        session_factory, item_id, a_id, "rejected", owner_email=OWNER
    )
    assert booking.status == "rejected"
    # the version bump was rolled back with the status write
    assert item.availability_version == 0


@pytest.mark.anyio
async def test_cancelled_booking_is_not_confirmed_later(session_factory):
    item_id, a_id, _ = await seed(session_factory)

    item, booking = await confirm_after_concurrent(
        session_factory, item_id, a_id, "cancelled", user_email="a@example.com"
    )
    assert booking.status == "cancelled"
    assert item.availability_version == 0


@pytest.mark.anyio
async def test_same_date_blocked_twice_at_once(session_factory, monkeypatch):
    item_id, _, _ = await seed(session_factory)
    day = date(2030, 6, 1)

    async with session_factory() as slow, session_factory() as fast:
        item_slow = await crud_items.get_item(slow, item_id)
        item_fast = await crud_items.get_item(fast, item_id)
        await block_dates(fast, item_fast, [day])

        # the slower request looked before the faster one inserted
        async def nothing_blocked(db, item_id):
            return []

        monkeypatch.setattr(crud_items, "list_unavailable_dates", nothing_blocked)
        with pytest.raises(StaleAvailabilityError):
            await block_dates(slow, item_slow, [day])

    monkeypatch.undo()
    async with session_factory() as db:
        rows = await crud_items.list_unavailable_dates(db, item_id)
        assert [r.unavailable_date for r in rows] == [day]


@pytest.mark.anyio
async def test_reject_does_not_need_the_version(session_factory):
    item_id, a_id, b_id = await seed(session_factory)

    async with session_factory() as db:
        item = await crud_items.get_item(db, item_id)
        booking_a = await crud_bookings.get_booking(db, a_id, item_id)
        booking_b = await crud_bookings.get_booking(db, b_id, item_id)

        reject_version = await check_transition(db, item, booking_b, "rejected", owner_email=OWNER)

        confirm_version = await check_transition(db, item, booking_a, "confirmed", owner_email=OWNER)
        await apply_transition(db, item, booking_a, "confirmed", confirm_version)
        assert item.availability_version == 1

        # rejecting frees nothing, so an older snapshot is still fine
        booking_b = await apply_transition(db, item, booking_b, "rejected", reject_version)
        assert booking_b.status == "rejected"
