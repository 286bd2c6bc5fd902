# backend/rentshare/schemas/item.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ItemBase(BaseModel):
    id: int
    owner_email: str
    title: str
    description: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    price: float
    location: str
    images: List[str]
    features: List[str]
    included: List[str]
    rules: List[str]
    available_from: Optional[date] = None
    available_until: Optional[date] = None
    min_rental_days: int
    max_rental_days: int
    delivery_available: bool
    pickup_available: bool
    cancellation_policy: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OwnerInfo(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    avatar: Optional[str] = None

    model_config = {"from_attributes": True}


class ItemDetail(ItemBase):
    owner: Optional[OwnerInfo] = None


class ItemCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    category: str = Field(min_length=1)
    subcategory: Optional[str] = None
    price: float = Field(gt=0)
    location: str = Field(min_length=1)
    images: List[str] = ["/placeholder.svg?height=300&width=400"]
    features: List[str] = []
    included: List[str] = []
    rules: List[str] = []
    available_from: Optional[date] = None
    available_until: Optional[date] = None
    min_rental_days: int = Field(default=1, ge=1)
    max_rental_days: int = Field(default=30, ge=1)
    delivery_available: bool = True
    pickup_available: bool = True
    cancellation_policy: str = "Free cancellation up to 24 hours before rental"


class ItemUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    location: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    included: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    available_from: Optional[date] = None
    available_until: Optional[date] = None
    min_rental_days: Optional[int] = None
    max_rental_days: Optional[int] = None
    delivery_available: Optional[bool] = None
    pickup_available: Optional[bool] = None
    cancellation_policy: Optional[str] = None
