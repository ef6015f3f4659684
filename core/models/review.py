# =============================================================================
# core/models/review.py - Review Schemas
# =============================================================================

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    """
    A review left by one party of a completed booking about the other.

    Example:
        {
            "booking_id": "550e8400-e29b-41d4-a716-446655440000",
            "reviewee_id": "6fa459ea-ee8a-3ca4-894e-db77e160355e",
            "rating": 5,
            "comment": "Great camera, exactly as described."
        }
    """

    booking_id: UUID
    reviewee_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, min_length=10, max_length=1000)


class ReviewFilters(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    reviewer_id: UUID | None = None
    reviewee_id: UUID | None = None
    booking_id: UUID | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    sort_by: Literal["created_at", "rating"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
