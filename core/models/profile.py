# =============================================================================
# core/models/profile.py - User Profile Schemas
# =============================================================================
# The profiles table holds the public record for each auth user
# (profiles.id == auth user id).
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field, HttpUrl

from .listing import Location


class ProfileUpdate(BaseModel):
    """
    Fields a user may change on their own profile.

    Example:
        {"full_name": "Sam Rivera", "phone": "4155550100"}
    """

    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, min_length=10, max_length=15)
    address: str | None = Field(default=None, min_length=5, max_length=500)
    location: Location | None = None
    avatar_url: HttpUrl | None = None

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if self.location is not None:
            row["location"] = self.location.to_point()
        return row


class ProfileStats(BaseModel):
    """Aggregates shown on a public profile."""

    total_listings: int = 0
    avg_rating: float = 0.0
    review_count: int = 0
    years_active: int = 0


# Columns safe to show to other users
PUBLIC_PROFILE_COLUMNS = "id, full_name, avatar_url, rating, verified, created_at"
