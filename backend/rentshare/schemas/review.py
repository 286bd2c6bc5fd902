# backend/rentshare/schemas/review.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from rentshare.schemas.booking import BookedItem


class ReviewCreate(BaseModel):
    booking_id: int = Field(alias="bookingId")
    reviewer_email: EmailStr = Field(alias="reviewerEmail")
    rating: int = Field(ge=1, le=5)
    review_title: Optional[str] = Field(default=None, alias="reviewTitle")
    review_text: Optional[str] = Field(default=None, alias="reviewText")

    model_config = {"populate_by_name": True}


class ReviewUpdate(BaseModel):
    review_id: int = Field(alias="reviewId")
    reviewer_email: EmailStr = Field(alias="reviewerEmail")
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    review_title: Optional[str] = Field(default=None, alias="reviewTitle")
    review_text: Optional[str] = Field(default=None, alias="reviewText")

    model_config = {"populate_by_name": True}


class ReviewOut(BaseModel):
    id: int
    item_id: int
    booking_id: int
    reviewer_email: str
    owner_email: str
    rating: int
    review_title: Optional[str] = None
    review_text: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserReviewOut(ReviewOut):
    item: Optional[BookedItem] = None


class UserReviewUpdate(BaseModel):
    user_email: EmailStr
    rating: int = Field(ge=1, le=5)
    review_text: Optional[str] = None


# --- helpfulness and reports ---

class VoteCreate(BaseModel):
    review_id: int = Field(alias="reviewId")
    user_email: EmailStr = Field(alias="userEmail")
    is_helpful: bool = Field(alias="isHelpful")

    model_config = {"populate_by_name": True}


class VoteOut(BaseModel):
    id: int
    review_id: int
    user_email: str
    is_helpful: bool

    model_config = {"from_attributes": True}


class ReportCreate(BaseModel):
    review_id: int = Field(alias="reviewId")
    reporter_email: EmailStr = Field(alias="reporterEmail")
    reason: Literal["spam", "inappropriate", "fake", "offensive", "other"]
    description: Optional[str] = None

    model_config = {"populate_by_name": True}


class ReportOut(BaseModel):
    id: int
    review_id: int
    reporter_email: str
    reason: str
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
