# rentshare/db/crud_users.py

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.db.models import User
from rentshare.core.security import get_password_hash


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.email == email))
    return res.scalar_one_or_none()


async def list_users_by_email(db: AsyncSession, emails: List[str]) -> List[User]:
    if not emails:
        return []
    res = await db.execute(select(User).where(User.email.in_(emails)))
    return list(res.scalars().all())


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    password: Optional[str] = None,
    phone: Optional[str] = None,
    location: Optional[str] = None,
) -> User:
    """
    Create a user; the password is hashed when given.
    """
    user = User(
        name=name,
        email=email,
        phone=phone,
        location=location,
        hashed_password=get_password_hash(password) if password else None,
        favorites=[],
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def update_user(db: AsyncSession, user: User, data: dict) -> User:
    for k, v in data.items():
        if v is not None:
            setattr(user, k, v)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user: User) -> None:
    await db.delete(user)
    await db.commit()


async def add_favorite(db: AsyncSession, user: User, item_id: int) -> List[int]:
    current = list(user.favorites or [])
    if item_id in current:
        return current
    # assign a new list so the JSON column is flagged dirty
    user.favorites = current + [item_id]
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return list(user.favorites)


async def remove_favorite(db: AsyncSession, user: User, item_id: int) -> List[int]:
    user.favorites = [i for i in (user.favorites or []) if i != item_id]
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return list(user.favorites)
