from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.db.session import get_db
from rentshare.db import crud_bookings, crud_users
from rentshare.schemas.booking import BookingWithItem

router = APIRouter()


@router.get("")
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    owner_email: Optional[str] = Query(None, alias="ownerEmail"),
    requester_email: Optional[str] = Query(None, alias="requesterEmail"),
):
    """
    Owners get the pending requests on their items, requesters get every
    booking they made.
    """
    if owner_email:
        pending = await crud_bookings.list_pending_for_owner(db, owner_email)
        renters = await crud_users.list_users_by_email(
            db, sorted({b.renter_email for b in pending})
        )
        by_email = {u.email: u for u in renters}
        notifications = []
        for b in pending:
            entry = BookingWithItem.model_validate(b).model_dump()
            renter = by_email.get(b.renter_email)
            entry["renter_name"] = renter.name if renter else None
            entry["renter_phone"] = renter.phone if renter else None
            notifications.append(entry)
        return {"notifications": notifications, "pendingCount": len(notifications)}

    if requester_email:
        bookings = await crud_bookings.list_bookings_for_renter(db, requester_email)
        return {"notifications": [BookingWithItem.model_validate(b) for b in bookings]}

    raise HTTPException(
        status_code=400,
        detail="Missing required parameters (ownerEmail or requesterEmail)",
    )
