# =============================================================================
# app/routers/reviews.py - Review Endpoints
# =============================================================================
# Listing reviews is public; leaving one requires authentication.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query, status

from app.dependencies import CurrentUser
from core.models import Pagination, ReviewCreate, ReviewFilters, success_response
from core.services import ReviewService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(payload: ReviewCreate, user: CurrentUser):
    """
    Review the other party of a completed booking.

    One review per booking per reviewer. The reviewee's profile rating is
    recomputed afterwards.
    """
    review = ReviewService.create_review(user.id, payload)
    return success_response(review, message="Review created successfully")


@router.get("")
async def list_reviews(filters: Annotated[ReviewFilters, Query()]):
    reviews, total = ReviewService.list_reviews(filters)
    return success_response(
        reviews,
        pagination=Pagination.from_counts(filters.page, filters.limit, total),
    )
