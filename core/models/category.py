# =============================================================================
# core/models/category.py - Category Schemas
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    """
    Schema for creating a category.

    Slugs are lowercase, digits and hyphens (e.g. "camping-gear").
    """

    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    icon: str | None = Field(default=None, min_length=1, max_length=50)
    parent_id: UUID | None = None
