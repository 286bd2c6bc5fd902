# rentshare/api/routers/items.py
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.api.dependencies import get_current_user, get_item_or_404
from rentshare.db.session import get_db
from rentshare.db.models import Item
from rentshare.db import crud_bookings, crud_items, crud_users
from rentshare.schemas.booking import CalendarDay, UnavailableDateOut, UnavailableDatesChange
from rentshare.schemas.item import ItemBase, ItemCreate, ItemDetail, ItemUpdate, OwnerInfo
from rentshare.services import availability, bookings as booking_service

router = APIRouter()

# one calendar screen plus margin
DEFAULT_CALENDAR_DAYS = 42
MAX_CALENDAR_DAYS = 366


@router.get("")
async def list_items(
    db: AsyncSession = Depends(get_db),
    category: Optional[str] = None,
):
    items = await crud_items.list_items(db, category=category)
    return [ItemBase.model_validate(i) for i in items]


@router.post("", status_code=201)
async def create_item(
    body: ItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """
    Create a listing owned by the authenticated user.
    """
    data = body.model_dump()
    data["available_from"] = data["available_from"] or date.today()
    data["available_until"] = data["available_until"] or date.today() + timedelta(days=365)
    item = await crud_items.create_item(db, owner_email=current_user.email, **data)
    return ItemBase.model_validate(item)


@router.get("/{item_id}")
async def get_item_detail(
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
):
    owner = await crud_users.get_user_by_email(db, item.owner_email)
    detail = ItemDetail.model_validate(item)
    detail.owner = OwnerInfo.model_validate(owner) if owner else None
    return detail


@router.put("/{item_id}")
async def update_item(
    body: ItemUpdate,
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    if item.owner_email != current_user.email:
        raise HTTPException(status_code=403, detail="Not allowed")

    item = await crud_items.update_item(db, item, body.model_dump(exclude_unset=True))
    return {"message": "Item updated successfully", "item": ItemBase.model_validate(item)}


@router.delete("/{item_id}")
async def delete_item(
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    if item.owner_email != current_user.email:
        raise HTTPException(status_code=403, detail="Not allowed")

    await crud_items.delete_item(db, item)
    return {"message": "Item deleted successfully"}


# ---------------------------
# Availability
# ---------------------------

@router.get("/{item_id}/unavailable")
async def get_unavailable_dates(
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
):
    confirmed, blocked = await booking_service.load_availability(db, item.id)
    entries = booking_service.unavailable_entries(item.id, blocked, confirmed)
    return {"unavailableDates": [UnavailableDateOut(**e) for e in entries]}


@router.post("/{item_id}/unavailable")
async def add_unavailable_dates(
    body: UnavailableDatesChange,
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
):
    """
    Owner blocks dates. Recurrence is stored as a hint only.
    """
    if item.owner_email != body.owner_email:
        raise HTTPException(
            status_code=403,
            detail="Unauthorized: Only item owner can set unavailable dates",
        )
    if body.is_recurring and not body.recurring_type:
        raise HTTPException(status_code=400, detail="recurringType is required for recurring dates")

    added = await booking_service.block_dates(
        db,
        item,
        body.dates,
        is_recurring=body.is_recurring,
        recurring_type=body.recurring_type,
    )
    entries = booking_service.unavailable_entries(item.id, added, [])
    return {"unavailableDates": [UnavailableDateOut(**e) for e in entries]}


@router.delete("/{item_id}/unavailable")
async def remove_unavailable_dates(
    body: UnavailableDatesChange,
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
):
    if item.owner_email != body.owner_email:
        raise HTTPException(
            status_code=403,
            detail="Unauthorized: Only item owner can remove unavailable dates",
        )

    removed = await booking_service.unblock_dates(db, item, body.dates)
    return {"message": "Unavailable dates removed successfully", "removed": removed}


@router.get("/{item_id}/booked-dates")
async def get_booked_dates(
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
):
    """
    Every date that cannot be booked, derived from blocked dates and
    confirmed bookings.
    """
    confirmed, blocked = await booking_service.load_availability(db, item.id)
    dates = availability.confirmed_dates(confirmed)
    dates.update(u.unavailable_date.isoformat() for u in blocked)
    return {"bookedDates": sorted(dates)}


@router.get("/{item_id}/calendar")
async def get_calendar(
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_email: Optional[str] = Query(None, alias="userEmail"),
):
    """
    Status of each date in [start, end] as seen by userEmail.
    """
    start = start or date.today()
    end = end or start + timedelta(days=DEFAULT_CALENDAR_DAYS - 1)
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")
    if (end - start).days >= MAX_CALENDAR_DAYS:
        raise HTTPException(status_code=400, detail="Date range too large")

    all_bookings = await crud_bookings.list_bookings_for_item(db, item.id)
    blocked = [u.unavailable_date for u in await crud_items.list_unavailable_dates(db, item.id)]
    viewer_is_owner = user_email is not None and user_email == item.owner_email

    days = [
        CalendarDay(
            date=day,
            status=availability.classify(
                day, all_bookings, blocked, user_email, viewer_is_owner
            ),
        )
        for day in availability.date_range(start, end)
    ]
    return {"itemId": item.id, "days": days}
