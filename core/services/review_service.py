# =============================================================================
# core/services/review_service.py - Review Business Logic
# =============================================================================
# Reviews are left by one party of a completed booking about the other.
# After each review the reviewee's profile rating is recomputed as the
# mean of all their ratings, rounded to one decimal.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, page_range, same_id
from core.models.booking import BookingStatus
from core.models.review import ReviewCreate, ReviewFilters
from core.services.booking_service import party_role
from app.exceptions import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

REVIEW_COLUMNS = (
    "id, booking_id, reviewer_id, reviewee_id, rating, comment, created_at, "
    "reviewer:profiles!reviews_reviewer_id_fkey(id, full_name, avatar_url), "
    "reviewee:profiles!reviews_reviewee_id_fkey(id, full_name, avatar_url), "
    "booking:bookings(id, listing:listings(id, title))"
)


def average_rating(ratings: list[int | float]) -> float:
    """Mean rating rounded to one decimal (0 when there are none)."""
    if not ratings:
        return 0.0
    return round(sum(ratings) / len(ratings), 1)


class ReviewService:
    """Service for review operations."""

    @staticmethod
    def create_review(reviewer_id: str | UUID, payload: ReviewCreate) -> dict[str, Any]:
        """
        Leave a review for the other party of a completed booking.

        Raises:
            NotFoundError: Booking doesn't exist
            BadRequestError: Booking not completed, or reviewee isn't the
                other party
            AuthorizationError: Caller isn't on the booking
            ConflictError: Caller already reviewed this booking
        """
        booking = SupabaseClient.fetch_by_id(
            "bookings",
            payload.booking_id,
            columns="id, renter_id, owner_id, status",
        )
        if not booking:
            raise NotFoundError("Booking", str(payload.booking_id))

        if booking.get("status") != BookingStatus.COMPLETED.value:
            raise BadRequestError("Reviews can only be created for completed bookings")

        role = party_role(booking, reviewer_id)
        if role is None:
            raise AuthorizationError("You can only review bookings you were part of")

        other_party = booking["owner_id"] if role == "renter" else booking["renter_id"]
        if not same_id(payload.reviewee_id, other_party):
            raise BadRequestError("Invalid reviewee for this booking")

        existing = SupabaseClient.fetch_first(
            "reviews",
            {"booking_id": str(payload.booking_id), "reviewer_id": normalize_uuid(reviewer_id)},
            columns="id",
        )
        if existing:
            raise ConflictError("You have already reviewed this booking")

        review = SupabaseClient.insert_row("reviews", {
            "booking_id": str(payload.booking_id),
            "reviewer_id": normalize_uuid(reviewer_id),
            "reviewee_id": str(payload.reviewee_id),
            "rating": payload.rating,
            "comment": payload.comment,
        })
        logger.info(f"Created review {review.get('id')} for booking {payload.booking_id}")

        ReviewService.refresh_rating(payload.reviewee_id)
        return review

    @staticmethod
    def refresh_rating(user_id: str | UUID) -> float:
        """Recompute and store a user's average rating."""
        client = SupabaseClient.get_client()
        rows = (
            client.table("reviews")
            .select("rating")
            .eq("reviewee_id", normalize_uuid(user_id))
            .execute()
        ).data or []

        rating = average_rating([row["rating"] for row in rows if row.get("rating") is not None])
        SupabaseClient.update_row("profiles", user_id, {"rating": rating})
        logger.debug(f"Profile {user_id} rating now {rating}")
        return rating

    @staticmethod
    def list_reviews(filters: ReviewFilters) -> tuple[list[dict[str, Any]], int]:
        """Public review listing with filters and pagination."""
        client = SupabaseClient.get_client()
        query = client.table("reviews").select(REVIEW_COLUMNS, count="exact")

        if filters.reviewer_id:
            query = query.eq("reviewer_id", str(filters.reviewer_id))
        if filters.reviewee_id:
            query = query.eq("reviewee_id", str(filters.reviewee_id))
        if filters.booking_id:
            query = query.eq("booking_id", str(filters.booking_id))
        if filters.rating:
            query = query.eq("rating", filters.rating)

        start, end = page_range(filters.page, filters.limit)
        response = (
            query
            .order(filters.sort_by, desc=filters.sort_order == "desc")
            .range(start, end)
            .execute()
        )
        return response.data or [], response.count or 0
