# rentshare/db/models.py

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Text,
    ForeignKey,
    Numeric,
    Boolean,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from rentshare.db.base import Base


def utcnow() -> datetime:
    # naive UTC, matches DateTime columns without timezone
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    location = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    avatar = Column(String(512), nullable=True)

    # DB column name: password_hash
    # Python attribute: hashed_password
    hashed_password = Column("password_hash", String(255), nullable=True)

    # list[int] of item ids as JSON in DB
    favorites = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)

    # owners and renters are identified by email
    owner_email = Column(String(255), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    subcategory = Column(String(50), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    location = Column(String(255), nullable=False)

    images = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    included = Column(JSON, nullable=False, default=list)
    rules = Column(JSON, nullable=False, default=list)

    available_from = Column(Date, nullable=True)
    available_until = Column(Date, nullable=True)
    min_rental_days = Column(Integer, nullable=False, default=1)
    max_rental_days = Column(Integer, nullable=False, default=30)
    delivery_available = Column(Boolean, nullable=False, default=True)
    pickup_available = Column(Boolean, nullable=False, default=True)
    cancellation_policy = Column(
        String(255),
        nullable=False,
        default="Free cancellation up to 24 hours before rental",
    )

    # Bumped by every write that changes the item's availability;
    # writers update conditionally on the value they read.
    availability_version = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    bookings = relationship(
        "Booking",
        back_populates="item",
        cascade="all,delete-orphan",
        passive_deletes=True,
    )

    unavailable_dates = relationship(
        "UnavailableDate",
        back_populates="item",
        cascade="all,delete-orphan",
        passive_deletes=True,
    )

    reviews = relationship(
        "Review",
        back_populates="item",
        cascade="all,delete-orphan",
        passive_deletes=True,
    )


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    item_id = Column(
        Integer,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    renter_email = Column(String(255), nullable=False, index=True)
    owner_email = Column(String(255), nullable=False, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    # "pending" | "confirmed" | "rejected" | "cancelled"
    status = Column(String(20), nullable=False, default="pending", index=True)

    total_days = Column(Integer, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    item = relationship("Item", back_populates="bookings")


class UnavailableDate(Base):
    __tablename__ = "unavailable_dates"
    __table_args__ = (
        UniqueConstraint("item_id", "unavailable_date", name="uq_unavailable_item_date"),
    )

    id = Column(Integer, primary_key=True, index=True)

    item_id = Column(
        Integer,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unavailable_date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)

    # display hint only; recurrence is never expanded server-side
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_type = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    item = relationship("Item", back_populates="unavailable_dates")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)

    item_id = Column(
        Integer,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    booking_id = Column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    reviewer_email = Column(String(255), nullable=False, index=True)
    owner_email = Column(String(255), nullable=False)

    rating = Column(Integer, nullable=False)
    review_title = Column(String(255), nullable=True)
    review_text = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    item = relationship("Item", back_populates="reviews")

    votes = relationship(
        "ReviewVote",
        back_populates="review",
        cascade="all,delete-orphan",
    )

    reports = relationship(
        "ReviewReport",
        back_populates="review",
        cascade="all,delete-orphan",
    )


class ReviewVote(Base):
    """One helpful / not helpful vote per user and review."""

    __tablename__ = "review_votes"
    __table_args__ = (
        UniqueConstraint("review_id", "user_email", name="uq_review_vote_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(
        Integer,
        ForeignKey("reviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_email = Column(String(255), nullable=False)
    is_helpful = Column(Boolean, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    review = relationship("Review", back_populates="votes")


class ReviewReport(Base):
    __tablename__ = "review_reports"
    __table_args__ = (
        UniqueConstraint("review_id", "reporter_email", name="uq_review_report_reporter"),
    )

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(
        Integer,
        ForeignKey("reviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reporter_email = Column(String(255), nullable=False)

    # "spam" | "inappropriate" | "fake" | "offensive" | "other"
    reason = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    review = relationship("Review", back_populates="reports")
