# =============================================================================
# core/models/listing.py - Listing Schemas
# =============================================================================
# These models define the API contract for rentable items:
# - ListingCreate / ListingUpdate: write payloads
# - ListingFilters: query parameters shared by /listings and /search
# - Location: a lat/lng pair stored as a PostGIS POINT
# =============================================================================

from enum import Enum
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl, StringConstraints


class ListingStatus(str, Enum):
    """
    Visibility of a listing.

    Only active listings are shown to people other than the owner.
    """
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"
    ARCHIVED = "archived"


class ItemCondition(str, Enum):
    """Owner-declared condition of the rented item."""
    NEW = "new"
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


Tag = Annotated[str, StringConstraints(min_length=1, max_length=50)]


class Location(BaseModel):
    """Geographic point (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_point(self) -> str:
        """PostGIS expects longitude first."""
        return f"POINT({self.lng} {self.lat})"


class ListingCreate(BaseModel):
    """
    Schema for creating a listing.

    Example:
        {
            "title": "Canon EOS R5 Camera Kit",
            "description": "Full-frame mirrorless body with 24-105mm lens.",
            "category_id": "550e8400-e29b-41d4-a716-446655440000",
            "price_per_day": 45.0,
            "condition": "like_new",
            "address": "12 Market Street, San Francisco",
            "location": {"lat": 37.79, "lng": -122.40},
            "photos": ["https://cdn.example.com/camera.jpg"]
        }
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10, max_length=5000)
    category_id: UUID
    price_per_day: float = Field(..., ge=0.01, description="Daily rental price")
    price_per_week: float | None = Field(default=None, ge=0.01)
    price_per_month: float | None = Field(default=None, ge=0.01)
    deposit_amount: float | None = Field(default=None, ge=0)
    condition: ItemCondition
    address: str = Field(..., min_length=5, max_length=500)
    location: Location
    photos: list[HttpUrl] = Field(..., min_length=1, max_length=10)
    tags: list[Tag] | None = Field(default=None, max_length=20)
    availability: dict[str, bool] | None = None
    status: ListingStatus = ListingStatus.DRAFT

    def to_row(self) -> dict[str, Any]:
        """Column values for the listings table."""
        row = self.model_dump(mode="json", exclude_none=True)
        row["location"] = self.location.to_point()
        return row


class ListingUpdate(BaseModel):
    """Partial update; only provided fields are written."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    category_id: UUID | None = None
    price_per_day: float | None = Field(default=None, ge=0.01)
    price_per_week: float | None = Field(default=None, ge=0.01)
    price_per_month: float | None = Field(default=None, ge=0.01)
    deposit_amount: float | None = Field(default=None, ge=0)
    condition: ItemCondition | None = None
    address: str | None = Field(default=None, min_length=5, max_length=500)
    location: Location | None = None
    photos: list[HttpUrl] | None = Field(default=None, min_length=1, max_length=10)
    tags: list[Tag] | None = Field(default=None, max_length=20)
    availability: dict[str, bool] | None = None
    status: ListingStatus | None = None

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if self.location is not None:
            row["location"] = self.location.to_point()
        return row


class ListingFilters(BaseModel):
    """
    Query filters for listing browse and search.

    `category` accepts a category UUID or slug. `tags` is comma-separated.
    `radius` is in kilometres and only applies with latitude and longitude.
    """

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    category: str | None = None
    location: str | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    condition: ItemCondition | None = None
    tags: str | None = None
    status: ListingStatus | None = None
    sort_by: Literal["created_at", "price_per_day", "title", "updated_at"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    radius: float = Field(default=10, ge=1, le=100)

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    @property
    def has_geo(self) -> bool:
        return self.latitude is not None and self.longitude is not None
