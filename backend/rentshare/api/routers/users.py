from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.api.dependencies import get_current_user, get_user_or_404
from rentshare.db.session import get_db
from rentshare.db.models import User
from rentshare.db import crud_bookings, crud_items, crud_users
from rentshare.schemas.item import ItemBase
from rentshare.schemas.user import FavoriteChange, UserBase, UserUpdate
from rentshare.services import availability

router = APIRouter()


def _require_self(user: User, current_user) -> None:
    if current_user.email != user.email:
        raise HTTPException(status_code=403, detail="You can only change your own profile")


@router.get("/me")
async def me(current_user=Depends(get_current_user)):
    return UserBase.model_validate(current_user)


@router.get("/{email}")
async def get_user(user: User = Depends(get_user_or_404)):
    return UserBase.model_validate(user)


@router.put("/{email}")
async def update_user(
    body: UserUpdate,
    user: User = Depends(get_user_or_404),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    _require_self(user, current_user)
    user = await crud_users.update_user(db, user, body.model_dump(exclude_unset=True))
    return UserBase.model_validate(user)


@router.delete("/{email}")
async def delete_user(
    user: User = Depends(get_user_or_404),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    _require_self(user, current_user)
    await crud_users.delete_user(db, user)
    return {"message": "User deleted"}


@router.get("/{email}/items")
async def user_items(
    user: User = Depends(get_user_or_404),
    db: AsyncSession = Depends(get_db),
):
    """
    Listings owned by the user with the dates each one is booked on.
    """
    items = await crud_items.list_items_for_owner(db, user.email)
    booked_dates = {}
    for item in items:
        confirmed = await crud_bookings.list_bookings_for_item(
            db, item.id, status=availability.CONFIRMED
        )
        blocked = await crud_items.list_unavailable_dates(db, item.id)
        dates = availability.confirmed_dates(confirmed)
        dates.update(u.unavailable_date.isoformat() for u in blocked)
        booked_dates[item.id] = sorted(dates)
    return {
        "items": [ItemBase.model_validate(i) for i in items],
        "bookedDates": booked_dates,
    }


# ---------------------------
# Favorites
# ---------------------------

@router.get("/{email}/favorites")
async def get_favorites(user: User = Depends(get_user_or_404)):
    return {"favorites": list(user.favorites or [])}


@router.post("/{email}/favorites")
async def add_favorite(
    body: FavoriteChange,
    user: User = Depends(get_user_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await crud_items.get_item(db, body.item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    favorites = await crud_users.add_favorite(db, user, body.item_id)
    return {"favorites": favorites}


@router.delete("/{email}/favorites")
async def remove_favorite(
    body: FavoriteChange,
    user: User = Depends(get_user_or_404),
    db: AsyncSession = Depends(get_db),
):
    favorites = await crud_users.remove_favorite(db, user, body.item_id)
    return {"favorites": favorites}
