# backend/rentshare/schemas/user.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    favorites: List[int] = []
    created_at: datetime

    # Pydantic v2 style (replaces orm_mode = True)
    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None
    location: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class FavoriteChange(BaseModel):
    item_id: int = Field(alias="itemId")

    model_config = {"populate_by_name": True}


class UserOut(UserBase):
    """
    Public-facing user data (e.g. auth token payload).
    """
    pass
