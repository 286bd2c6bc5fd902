# rentshare/db/crud_reviews.py
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rentshare.db.models import Booking, Review, ReviewReport, ReviewVote

SORT_ORDERS = {
    "newest": (Review.created_at.desc(), Review.id.desc()),
    "oldest": (Review.created_at.asc(), Review.id.asc()),
    "rating_high": (Review.rating.desc(), Review.id.desc()),
    "rating_low": (Review.rating.asc(), Review.id.desc()),
}


async def list_reviews(
    db: AsyncSession,
    item_id: int,
    *,
    rating: Optional[int] = None,
    sort: str = "newest",
    page: int = 1,
    per_page: int = 10,
) -> Tuple[List[Review], int]:
    stmt = select(Review).where(Review.item_id == item_id)
    if rating is not None:
        stmt = stmt.where(Review.rating == rating)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    stmt = stmt.order_by(*SORT_ORDERS.get(sort, SORT_ORDERS["newest"]))
    stmt = stmt.offset((page - 1) * per_page).limit(per_page)
    res = await db.execute(stmt)
    return list(res.scalars().all()), int(total)


async def rating_stats(db: AsyncSession, item_id: int) -> Dict:
    """
    Average (2 decimals), count and 1..5 distribution for an item.
    """
    res = await db.execute(
        select(Review.rating, func.count(Review.id))
        .where(Review.item_id == item_id)
        .group_by(Review.rating)
    )
    distribution = {r: 0 for r in range(1, 6)}
    for rating, count in res.all():
        distribution[int(rating)] = int(count)

    total = sum(distribution.values())
    average = (
        sum(r * c for r, c in distribution.items()) / total if total else 0
    )
    return {
        "averageRating": round(average, 2),
        "totalReviews": total,
        "ratingDistribution": distribution,
    }


async def get_review(
    db: AsyncSession,
    review_id: int,
    item_id: int,
    reviewer_email: str,
) -> Optional[Review]:
    res = await db.execute(
        select(Review).where(
            Review.id == review_id,
            Review.item_id == item_id,
            Review.reviewer_email == reviewer_email,
        )
    )
    return res.scalar_one_or_none()


async def get_review_by_id(db: AsyncSession, review_id: int) -> Optional[Review]:
    res = await db.execute(select(Review).where(Review.id == review_id))
    return res.scalar_one_or_none()


async def get_review_for_booking(db: AsyncSession, booking_id: int) -> Optional[Review]:
    res = await db.execute(select(Review).where(Review.booking_id == booking_id))
    return res.scalar_one_or_none()


async def create_review(db: AsyncSession, **kwargs) -> Review:
    review = Review(**kwargs)
    db.add(review)
    await db.commit()
    await db.refresh(review)
    return review


async def update_review(db: AsyncSession, review: Review, data: dict) -> Review:
    for k, v in data.items():
        setattr(review, k, v)
    db.add(review)
    await db.commit()
    await db.refresh(review)
    return review


async def delete_review(db: AsyncSession, review: Review) -> None:
    await db.delete(review)
    await db.commit()


async def list_reviewable_bookings(
    db: AsyncSession,
    renter_email: str,
    today: date,
) -> List[Booking]:
    """
    Confirmed bookings of renter_email that ended before today and have no
    review yet.
    """
    reviewed = select(Review.booking_id)
    stmt = (
        select(Booking)
        .options(selectinload(Booking.item))
        .where(Booking.renter_email == renter_email)
        .where(Booking.status == "confirmed")
        .where(Booking.end_date < today)
        .where(Booking.id.not_in(reviewed))
        .order_by(Booking.end_date.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


# --- a user's own reviews ---

async def list_user_reviews(
    db: AsyncSession,
    reviewer_email: str,
    *,
    offset: int = 0,
    limit: int = 10,
) -> Tuple[List[Review], int]:
    stmt = select(Review).where(Review.reviewer_email == reviewer_email)
    total = (
        await db.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()

    stmt = (
        stmt.options(selectinload(Review.item))
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(offset)
        .limit(limit)
    )
    res = await db.execute(stmt)
    return list(res.scalars().all()), int(total)


async def get_user_review(
    db: AsyncSession,
    review_id: int,
    reviewer_email: str,
) -> Optional[Review]:
    res = await db.execute(
        select(Review)
        .options(selectinload(Review.item))
        .where(Review.id == review_id, Review.reviewer_email == reviewer_email)
    )
    return res.scalar_one_or_none()


# --- helpfulness votes ---

async def get_vote(db: AsyncSession, review_id: int, user_email: str) -> Optional[ReviewVote]:
    res = await db.execute(
        select(ReviewVote).where(
            ReviewVote.review_id == review_id,
            ReviewVote.user_email == user_email,
        )
    )
    return res.scalar_one_or_none()


async def create_vote(db: AsyncSession, **kwargs) -> ReviewVote:
    vote = ReviewVote(**kwargs)
    db.add(vote)
    await db.commit()
    await db.refresh(vote)
    return vote


async def set_vote(db: AsyncSession, vote: ReviewVote, is_helpful: bool) -> ReviewVote:
    vote.is_helpful = is_helpful
    db.add(vote)
    await db.commit()
    await db.refresh(vote)
    return vote


async def vote_counts(db: AsyncSession, review_id: int) -> Tuple[int, int]:
    """
    (helpful, not helpful) vote counts of a review.
    """
    res = await db.execute(
        select(ReviewVote.is_helpful, func.count(ReviewVote.id))
        .where(ReviewVote.review_id == review_id)
        .group_by(ReviewVote.is_helpful)
    )
    counts = {bool(k): int(v) for k, v in res.all()}
    return counts.get(True, 0), counts.get(False, 0)


# --- reports ---

async def get_report(
    db: AsyncSession,
    review_id: int,
    reporter_email: str,
) -> Optional[ReviewReport]:
    res = await db.execute(
        select(ReviewReport).where(
            ReviewReport.review_id == review_id,
            ReviewReport.reporter_email == reporter_email,
        )
    )
    return res.scalar_one_or_none()


async def create_report(db: AsyncSession, **kwargs) -> ReviewReport:
    report = ReviewReport(**kwargs)
    db.add(report)
    await db.commit()
    await db.refresh(report)
    return report


async def list_reports(db: AsyncSession, review_id: int) -> List[ReviewReport]:
    res = await db.execute(
        select(ReviewReport)
        .where(ReviewReport.review_id == review_id)
        .order_by(ReviewReport.created_at.desc(), ReviewReport.id.desc())
    )
    return list(res.scalars().all())
