# rentshare/api/routers/reviews.py
import math
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.api.dependencies import get_item_or_404, require_admin
from rentshare.core.config import get_settings
from rentshare.db.session import get_db
from rentshare.db.models import Item
from rentshare.db import crud_bookings, crud_reviews
from rentshare.schemas.booking import BookingWithItem
from rentshare.schemas.review import (
    ReportCreate,
    ReportOut,
    ReviewCreate,
    ReviewOut,
    ReviewUpdate,
    UserReviewOut,
    UserReviewUpdate,
    VoteCreate,
    VoteOut,
)
from rentshare.services.availability import CONFIRMED

router = APIRouter()


def _strip(text: Optional[str]) -> Optional[str]:
    return (text or "").strip() or None


# literal /reviews/... paths are declared before /reviews/{item_id}

@router.post("/reviews/helpfulness")
async def vote_helpfulness(
    body: VoteCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    One vote per user and review. Voting again with the other value flips
    the vote; voting again with the same value changes nothing.
    """
    if not await crud_reviews.get_review_by_id(db, body.review_id):
        raise HTTPException(status_code=404, detail="Review not found")

    vote = await crud_reviews.get_vote(db, body.review_id, body.user_email)
    if vote is None:
        vote = await crud_reviews.create_vote(
            db,
            review_id=body.review_id,
            user_email=body.user_email,
            is_helpful=body.is_helpful,
        )
        response.status_code = 201
        return {"vote": VoteOut.model_validate(vote), "message": "Vote created successfully"}

    if vote.is_helpful == body.is_helpful:
        return {"vote": VoteOut.model_validate(vote), "message": "Vote already exists with same value"}

    vote = await crud_reviews.set_vote(db, vote, body.is_helpful)
    return {"vote": VoteOut.model_validate(vote), "message": "Vote updated successfully"}


@router.get("/reviews/helpfulness")
async def helpfulness_stats(
    db: AsyncSession = Depends(get_db),
    review_id: int = Query(..., alias="reviewId"),
):
    helpful, not_helpful = await crud_reviews.vote_counts(db, review_id)
    total = helpful + not_helpful
    return {
        "reviewId": review_id,
        "helpfulCount": helpful,
        "notHelpfulCount": not_helpful,
        "totalVotes": total,
        "helpfulPercentage": round(helpful * 100 / total) if total else 0,
    }


@router.post("/reviews/report", status_code=201)
async def report_review(body: ReportCreate, db: AsyncSession = Depends(get_db)):
    review = await crud_reviews.get_review_by_id(db, body.review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    if review.reviewer_email == body.reporter_email:
        raise HTTPException(status_code=400, detail="You cannot report your own review")
    if await crud_reviews.get_report(db, review.id, body.reporter_email):
        raise HTTPException(status_code=409, detail="You have already reported this review")

    report = await crud_reviews.create_report(
        db,
        review_id=review.id,
        reporter_email=body.reporter_email,
        reason=body.reason,
        description=_strip(body.description),
    )
    return {
        "report": ReportOut.model_validate(report),
        "message": "Review reported successfully. Our team will review it shortly.",
    }


@router.get("/reviews/report")
async def list_reports(
    db: AsyncSession = Depends(get_db),
    review_id: int = Query(..., alias="reviewId"),
    admin=Depends(require_admin),
):
    reports = await crud_reviews.list_reports(db, review_id)
    return {
        "reports": [ReportOut.model_validate(r) for r in reports],
        "count": len(reports),
    }


@router.get("/reviews/{item_id}")
async def list_reviews(
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    sort: str = "newest",
    rating: Optional[int] = Query(None, ge=1, le=5),
    stats_only: bool = Query(False, alias="statsOnly"),
):
    stats = await crud_reviews.rating_stats(db, item.id)
    if stats_only:
        return {"stats": stats}

    per_page = limit or get_settings().REVIEWS_PAGE_SIZE
    reviews, total = await crud_reviews.list_reviews(
        db, item.id, rating=rating, sort=sort, page=page, per_page=per_page
    )
    return {
        "reviews": [
            {
                **ReviewOut.model_validate(r).model_dump(),
                "reviewer": {"name": r.reviewer_email.split("@")[0]},
            }
            for r in reviews
        ],
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / per_page),
            "totalReviews": total,
            "hasNextPage": page * per_page < total,
            "hasPreviousPage": page > 1,
        },
        "stats": stats,
    }


@router.post("/reviews/{item_id}", status_code=201)
async def create_review(
    body: ReviewCreate,
    item: Item = Depends(get_item_or_404),
    db: AsyncSession = Depends(get_db),
):
    """
    Only the renter of a confirmed booking that has ended may review it,
    once per booking.
    """
    booking = await crud_bookings.get_booking(db, body.booking_id, item.id)
    if (
        not booking
        or booking.renter_email != body.reviewer_email
        or booking.status != CONFIRMED
        or booking.end_date >= date.today()
    ):
        raise HTTPException(
            status_code=403,
            detail="Only users with completed bookings can submit reviews",
        )

    if await crud_reviews.get_review_for_booking(db, booking.id):
        raise HTTPException(status_code=409, detail="Review already exists for this booking")

    review = await crud_reviews.create_review(
        db,
        item_id=item.id,
        booking_id=booking.id,
        reviewer_email=body.reviewer_email,
        owner_email=booking.owner_email,
        rating=body.rating,
        review_title=_strip(body.review_title),
        review_text=_strip(body.review_text),
    )
    return {"review": ReviewOut.model_validate(review), "message": "Review created successfully"}


@router.put("/reviews/{item_id}")
async def update_review(
    body: ReviewUpdate,
    item_id: int,
    db: AsyncSession = Depends(get_db),
):
    review = await crud_reviews.get_review(db, body.review_id, item_id, body.reviewer_email)
    if not review:
        raise HTTPException(
            status_code=404,
            detail="Review not found or you do not have permission to edit it",
        )

    data = {}
    fields = body.model_dump(exclude_unset=True)
    if body.rating is not None:
        data["rating"] = body.rating
    if "review_title" in fields:
        data["review_title"] = _strip(body.review_title)
    if "review_text" in fields:
        data["review_text"] = _strip(body.review_text)

    review = await crud_reviews.update_review(db, review, data)
    return {"review": ReviewOut.model_validate(review), "message": "Review updated successfully"}


@router.delete("/reviews/{item_id}")
async def delete_review(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    review_id: int = Query(..., alias="reviewId"),
    reviewer_email: str = Query(..., alias="reviewerEmail"),
):
    review = await crud_reviews.get_review(db, review_id, item_id, reviewer_email)
    if not review:
        raise HTTPException(
            status_code=404,
            detail="Review not found or you do not have permission to delete it",
        )
    await crud_reviews.delete_review(db, review)
    return {"message": "Review deleted successfully"}


@router.get("/user/reviewable-bookings")
async def reviewable_bookings(
    db: AsyncSession = Depends(get_db),
    user_email: Optional[str] = Query(None, alias="userEmail"),
):
    if not user_email:
        raise HTTPException(status_code=400, detail="userEmail parameter required")

    bookings = await crud_reviews.list_reviewable_bookings(db, user_email, date.today())
    return {
        "bookings": [BookingWithItem.model_validate(b) for b in bookings],
        "count": len(bookings),
    }


# --- the signed-in renter's own reviews ---

@router.get("/user/reviews")
async def user_reviews(
    user_email: str,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status: Literal["all", "pending", "submitted"] = "all",
):
    """
    status=pending lists finished bookings still waiting for a review,
    anything else lists the reviews already written.
    """
    if status == "pending":
        bookings = await crud_reviews.list_reviewable_bookings(db, user_email, date.today())
        return {
            "data": [
                {
                    "booking_id": b.id,
                    "booking": BookingWithItem.model_validate(b),
                    "status": "pending",
                }
                for b in bookings[offset:offset + limit]
            ],
            "count": len(bookings),
            "total_pages": math.ceil(len(bookings) / limit),
        }

    reviews, total = await crud_reviews.list_user_reviews(
        db, user_email, offset=offset, limit=limit
    )
    return {
        "data": [UserReviewOut.model_validate(r) for r in reviews],
        "count": len(reviews),
        "total_count": total,
        "total_pages": math.ceil(total / limit),
        "current_page": offset // limit + 1,
    }


@router.put("/user/reviews")
async def update_user_review(
    body: UserReviewUpdate,
    review_id: int,
    db: AsyncSession = Depends(get_db),
):
    review = await crud_reviews.get_user_review(db, review_id, body.user_email)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found or unauthorized")

    await crud_reviews.update_review(
        db, review, {"rating": body.rating, "review_text": _strip(body.review_text)}
    )
    # reload with the item attached
    review = await crud_reviews.get_user_review(db, review_id, body.user_email)
    return {"message": "Review updated successfully", "data": UserReviewOut.model_validate(review)}


@router.delete("/user/reviews")
async def delete_user_review(
    review_id: int,
    user_email: str,
    db: AsyncSession = Depends(get_db),
):
    review = await crud_reviews.get_user_review(db, review_id, user_email)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found or unauthorized")
    await crud_reviews.delete_review(db, review)
    return {"message": "Review deleted successfully"}
