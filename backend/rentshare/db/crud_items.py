# rentshare/db/crud_items.py
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.db.models import Item, UnavailableDate


async def list_items(db: AsyncSession, category: Optional[str] = None) -> List[Item]:
    stmt = select(Item).order_by(Item.created_at.desc(), Item.id.desc())
    if category:
        stmt = stmt.where(Item.category == category)
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_items_for_owner(db: AsyncSession, owner_email: str) -> List[Item]:
    res = await db.execute(
        select(Item)
        .where(Item.owner_email == owner_email)
        .order_by(Item.created_at.desc(), Item.id.desc())
    )
    return list(res.scalars().all())


async def get_item(db: AsyncSession, item_id: int) -> Item | None:
    res = await db.execute(select(Item).where(Item.id == item_id))
    return res.scalars().first()


async def create_item(db: AsyncSession, **kwargs) -> Item:
    item = Item(**kwargs)
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def update_item(db: AsyncSession, item: Item, data: dict) -> Item:
    for k, v in data.items():
        if v is not None:
            setattr(item, k, v)
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def delete_item(db: AsyncSession, item: Item):
    await db.delete(item)
    await db.commit()
    return True


# --- availability bookkeeping ---

async def bump_availability_version(
    db: AsyncSession,
    item_id: int,
    expected_version: int,
) -> bool:
    """
    Conditional write: increment the item's availability_version only if it
    still equals expected_version. False means another writer got there
    first. Does not commit.
    """
    res = await db.execute(
        update(Item)
        .where(Item.id == item_id, Item.availability_version == expected_version)
        .values(availability_version=expected_version + 1)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount == 1


async def list_unavailable_dates(db: AsyncSession, item_id: int) -> List[UnavailableDate]:
    res = await db.execute(
        select(UnavailableDate)
        .where(UnavailableDate.item_id == item_id)
        .order_by(UnavailableDate.unavailable_date.asc())
    )
    return list(res.scalars().all())


async def add_unavailable_dates(
    db: AsyncSession,
    item_id: int,
    dates: Iterable[date],
    *,
    reason: str,
    is_recurring: bool = False,
    recurring_type: Optional[str] = None,
) -> List[UnavailableDate]:
    """
    Insert blocked dates, skipping ones already present. Does not commit.
    """
    existing = {u.unavailable_date for u in await list_unavailable_dates(db, item_id)}
    added: List[UnavailableDate] = []
    for d in sorted(set(dates)):
        if d in existing:
            continue
        row = UnavailableDate(
            item_id=item_id,
            unavailable_date=d,
            reason=reason,
            is_recurring=is_recurring,
            recurring_type=recurring_type,
        )
        db.add(row)
        added.append(row)
    await db.flush()
    return added


async def remove_unavailable_dates(
    db: AsyncSession,
    item_id: int,
    dates: Iterable[date],
) -> int:
    """
    Delete blocked dates. Does not commit.
    """
    res = await db.execute(
        delete(UnavailableDate).where(
            UnavailableDate.item_id == item_id,
            UnavailableDate.unavailable_date.in_(list(dates)),
        )
    )
    return res.rowcount
