# scripts/seed.py
import asyncio
import random
from datetime import date, timedelta

from rentshare.db.base import Base
from rentshare.db.session import AsyncSessionLocal, engine
from rentshare.db.crud_users import create_user, get_user_by_email
from rentshare.db.crud_items import create_item, get_item
from rentshare.services.bookings import block_dates, change_status, request_booking

CATEGORIES = ["tools", "electronics", "furniture", "vehicles", "travel-gear"]
CITIES = ["Delhi", "Mumbai", "Bengaluru", "Pune"]


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        owners = []
        for i in range(3):
            email = f"owner{i}@example.com"
            u = await get_user_by_email(db, email)
            if not u:
                u = await create_user(db, name=f"Owner {i}", email=email, password="password")
            owners.append(u)

        renter = await get_user_by_email(db, "renter@example.com")
        if not renter:
            renter = await create_user(db, name="Renter", email="renter@example.com", password="password")

        items = []
        for i in range(12):
            owner = random.choice(owners)
            items.append(await create_item(
                db,
                owner_email=owner.email,
                title=f"Item {i}",
                description="Well kept, ready to rent",
                category=random.choice(CATEGORIES),
                price=100 + i * 25,
                location=random.choice(CITIES),
                images=["/placeholder.svg?height=300&width=400"],
                available_from=date.today(),
                available_until=date.today() + timedelta(days=365),
            ))

        # a blocked weekend, one confirmed and one pending booking on the first item
        first = items[0]
        start = date.today() + timedelta(days=7)
        await block_dates(db, first, [start + timedelta(days=5), start + timedelta(days=6)])
        booking = await request_booking(
            db,
            first,
            renter_email=renter.email,
            owner_email=first.owner_email,
            start_date=start,
            end_date=start + timedelta(days=2),
        )
        first = await get_item(db, first.id)
        await change_status(db, first, booking, "confirmed", owner_email=first.owner_email)
        await request_booking(
            db,
            first,
            renter_email=renter.email,
            owner_email=first.owner_email,
            start_date=start + timedelta(days=3),
            end_date=start + timedelta(days=4),
        )
    print("Seed complete")


if __name__ == "__main__":
    asyncio.run(seed())
