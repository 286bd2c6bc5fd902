# backend/rentshare/schemas/booking.py
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class BookingCreate(BaseModel):
    user_email: EmailStr = Field(alias="userEmail")
    owner_email: EmailStr = Field(alias="ownerEmail")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    note: Optional[str] = None

    model_config = {"populate_by_name": True}


class BookingStatusUpdate(BaseModel):
    booking_id: int = Field(alias="bookingId")
    # checked against the state machine by the handler
    status: str
    owner_email: Optional[EmailStr] = Field(default=None, alias="ownerEmail")
    user_email: Optional[EmailStr] = Field(default=None, alias="userEmail")

    model_config = {"populate_by_name": True}


class BookingOut(BaseModel):
    id: int
    item_id: int
    renter_email: str
    owner_email: str
    start_date: date
    end_date: date
    status: str
    total_days: int
    total_amount: float
    note: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    # Pydantic v2 style – replaces orm_mode=True
    model_config = {"from_attributes": True}


class BookedItem(BaseModel):
    id: int
    title: str
    category: str
    price: float
    images: List[str]
    owner_email: str

    model_config = {"from_attributes": True}


class BookingWithItem(BookingOut):
    item: Optional[BookedItem] = None


class UnavailableDateOut(BaseModel):
    id: str
    item_id: int
    unavailable_date: date
    reason: Optional[str] = None
    # "owner" for blocked dates, "booking" for confirmed-booking dates
    source: Literal["owner", "booking"]
    is_recurring: bool = False
    recurring_type: Optional[str] = None


class UnavailableDatesChange(BaseModel):
    owner_email: EmailStr = Field(alias="ownerEmail")
    dates: List[date]
    is_recurring: bool = Field(default=False, alias="isRecurring")
    recurring_type: Optional[Literal["weekly", "monthly"]] = Field(
        default=None, alias="recurringType"
    )

    model_config = {"populate_by_name": True}


class CalendarDay(BaseModel):
    date: date
    status: str
