import asyncio
import os
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"

from rentshare.main import app
from rentshare.api.dependencies import get_current_user
from rentshare.db.base import Base
from rentshare.db.session import get_db

OWNER = "owner@example.com"
RENTER = "renter@example.com"
OTHER_RENTER = "second@example.com"
STRANGER = "stranger@example.com"

# TestClient runs every request on a fresh event loop, so connections must
# not be pooled across requests.
test_engine = create_async_engine(os.environ["DATABASE_URL"], poolclass=NullPool)
TestSession = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


async def override_get_db():
    async with TestSession() as session:
        yield session


async def _reset_tables():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_database():
    asyncio.run(_reset_tables())
    yield


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def session_factory():
    return TestSession


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def login_as():
    def _login(email):
        app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(email=email)
    return _login


@pytest.fixture
def item(client, login_as):
    """An item owned by OWNER."""
    login_as(OWNER)
    response = client.post(
        "/api/items",
        json={
            "title": "Camping tent",
            "description": "Four person tent",
            "category": "travel-gear",
            "price": 25,
            "location": "Pune",
        },
    )
    assert response.status_code == 201
    app.dependency_overrides.pop(get_current_user)
    return response.json()


@pytest.fixture
def book(client):
    """Request a booking and return the response."""
    def _book(item_id, renter, start, end, owner=OWNER):
        return client.post(
            f"/api/items/{item_id}/bookings",
            json={
                "userEmail": renter,
                "ownerEmail": owner,
                "startDate": str(start),
                "endDate": str(end),
            },
        )
    return _book


@pytest.fixture
def set_status(client):
    def _set_status(item_id, booking_id, status, owner_email=None, user_email=None):
        body = {"bookingId": booking_id, "status": status}
        if owner_email:
            body["ownerEmail"] = owner_email
        if user_email:
            body["userEmail"] = user_email
        return client.put(f"/api/items/{item_id}/bookings", json=body)
    return _set_status
