# rentshare/db/crud_bookings.py

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rentshare.db.models import Booking, Item


async def create_booking(
    db: AsyncSession,
    *,
    item_id: int,
    renter_email: str,
    owner_email: str,
    start_date: date,
    end_date: date,
    total_days: int,
    total_amount: Decimal,
    note: Optional[str] = None,
) -> Booking:
    booking = Booking(
        item_id=item_id,
        renter_email=renter_email,
        owner_email=owner_email,
        start_date=start_date,
        end_date=end_date,
        total_days=total_days,
        total_amount=total_amount,
        note=note,
        status="pending",
    )
    db.add(booking)
    await db.commit()
    await db.refresh(booking)
    return booking


async def get_booking(db: AsyncSession, booking_id: int, item_id: int) -> Optional[Booking]:
    res = await db.execute(
        select(Booking).where(Booking.id == booking_id, Booking.item_id == item_id)
    )
    return res.scalar_one_or_none()


async def update_status_if(
    db: AsyncSession,
    booking_id: int,
    expected_status: str,
    status: str,
) -> bool:
    """
    Conditional write: move the booking to status only if it is still in
    expected_status. Does not commit.
    """
    res = await db.execute(
        update(Booking)
        .where(Booking.id == booking_id, Booking.status == expected_status)
        .values(status=status)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount == 1


async def list_bookings_for_item(
    db: AsyncSession,
    item_id: int,
    *,
    status: Optional[str] = None,
    exclude_id: Optional[int] = None,
) -> List[Booking]:
    stmt = select(Booking).where(Booking.item_id == item_id)
    if status:
        stmt = stmt.where(Booking.status == status)
    if exclude_id is not None:
        stmt = stmt.where(Booking.id != exclude_id)
    stmt = stmt.order_by(Booking.created_at.desc(), Booking.id.desc())
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_bookings(
    db: AsyncSession,
    *,
    user_email: Optional[str] = None,
    item_id: Optional[int] = None,
) -> List[Booking]:
    """
    Bookings where user_email is renter or owner, optionally for one item.
    Item is eagerly loaded for the response.
    """
    stmt = select(Booking).options(selectinload(Booking.item))
    if user_email:
        stmt = stmt.where(
            or_(Booking.renter_email == user_email, Booking.owner_email == user_email)
        )
    if item_id is not None:
        stmt = stmt.where(Booking.item_id == item_id)
    stmt = stmt.order_by(Booking.created_at.desc(), Booking.id.desc())
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_bookings_for_renter(db: AsyncSession, renter_email: str) -> List[Booking]:
    stmt = (
        select(Booking)
        .options(selectinload(Booking.item))
        .where(Booking.renter_email == renter_email)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_bookings_for_owner(db: AsyncSession, owner_email: str) -> List[Booking]:
    stmt = (
        select(Booking)
        .options(selectinload(Booking.item))
        .where(Booking.owner_email == owner_email)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_pending_for_owner(db: AsyncSession, owner_email: str) -> List[Booking]:
    """
    Pending requests on every item owned by owner_email.
    """
    stmt = (
        select(Booking)
        .join(Item, Booking.item_id == Item.id)
        .options(selectinload(Booking.item))
        .where(Item.owner_email == owner_email)
        .where(Booking.status == "pending")
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())
