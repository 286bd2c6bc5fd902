from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.api.dependencies import get_item_or_404
from rentshare.db.session import get_db
from rentshare.db.models import Item
from rentshare.db import crud_bookings
from rentshare.schemas.booking import (
    BookingCreate,
    BookingOut,
    BookingStatusUpdate,
    BookingWithItem,
    UnavailableDateOut,
)
from rentshare.services import availability, bookings as booking_service
from rentshare.services.availability import CANCELLED, CONFIRMED, REJECTED

router = APIRouter()

UPDATABLE_STATUSES = (CONFIRMED, REJECTED, CANCELLED)


@router.get("/items/{item_id}/bookings")
async def item_bookings(
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
    user_email: Optional[str] = Query(None, alias="userEmail"),
    owner_email: Optional[str] = Query(None, alias="ownerEmail"),
):
    """
    Bookings of an item filtered by who is looking, plus every date that is
    not bookable (owner-blocked or taken by a confirmed booking).
    """
    claimed_owner = owner_email or item.owner_email
    viewer_is_owner = (
        user_email is not None
        and user_email == claimed_owner
        and claimed_owner == item.owner_email
    )

    all_bookings = await crud_bookings.list_bookings_for_item(db, item.id)
    visible = availability.visible_bookings(all_bookings, user_email, viewer_is_owner)

    confirmed, blocked = await booking_service.load_availability(db, item.id)
    entries = booking_service.unavailable_entries(item.id, blocked, confirmed)

    return {
        "bookings": [BookingOut.model_validate(b) for b in visible],
        "unavailableDates": [UnavailableDateOut(**e) for e in entries],
    }


@router.post("/items/{item_id}/bookings", status_code=201)
async def create_item_booking(
    body: BookingCreate,
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
):
    booking = await booking_service.request_booking(
        db,
        item,
        renter_email=body.user_email,
        owner_email=body.owner_email,
        start_date=body.start_date,
        end_date=body.end_date,
        note=body.note,
    )
    return {"booking": BookingOut.model_validate(booking)}


@router.put("/items/{item_id}/bookings")
async def update_item_booking(
    body: BookingStatusUpdate,
    item_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Move a booking along its lifecycle: the owner confirms or rejects,
    renter or owner cancels. Confirmation re-checks availability.
    """
    if body.status not in UPDATABLE_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    booking = await crud_bookings.get_booking(db, body.booking_id, item_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    item = await get_item_or_404(item_id, db)

    booking = await booking_service.change_status(
        db,
        item,
        booking,
        body.status,
        user_email=body.user_email,
        owner_email=body.owner_email,
    )
    return {"booking": BookingOut.model_validate(booking)}


@router.get("/bookings")
async def list_bookings(
    db: AsyncSession = Depends(get_db),
    user_email: Optional[str] = Query(None, alias="userEmail"),
    item_id: Optional[int] = Query(None, alias="itemId"),
):
    """
    Bookings where the user is renter or owner, optionally for one item.
    """
    items = await crud_bookings.list_bookings(db, user_email=user_email, item_id=item_id)
    return {"bookings": [BookingWithItem.model_validate(b) for b in items]}


@router.get("/bookings/history")
async def booking_history(
    db: AsyncSession = Depends(get_db),
    user_email: Optional[str] = Query(None, alias="userEmail"),
):
    if not user_email:
        raise HTTPException(status_code=400, detail="User email is required")

    as_renter = await crud_bookings.list_bookings_for_renter(db, user_email)
    as_owner = await crud_bookings.list_bookings_for_owner(db, user_email)
    return {
        "userBookings": [BookingWithItem.model_validate(b) for b in as_renter],
        "ownerBookings": [BookingWithItem.model_validate(b) for b in as_owner],
    }
