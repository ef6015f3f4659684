# =============================================================================
# core/models/search.py - Search Schemas
# =============================================================================

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from .listing import ListingFilters


class SearchFilters(ListingFilters):
    """Listing filters plus a text query and an optional free-date window."""

    query: str | None = Field(default=None, max_length=200)
    available_from: date | None = None
    available_to: date | None = None

    @model_validator(mode="after")
    def check_window(self) -> "SearchFilters":
        if self.available_from and self.available_to and self.available_to < self.available_from:
            raise ValueError("available_to must not be before available_from")
        return self

    @property
    def has_window(self) -> bool:
        return self.available_from is not None and self.available_to is not None

    def analytics_filters(self) -> dict:
        """Filters worth recording alongside a search, without paging."""
        return self.model_dump(
            mode="json",
            exclude={"page", "limit", "query", "sort_by", "sort_order"},
            exclude_none=True,
        )


class SuggestionQuery(BaseModel):
    query: str = Field(default="", max_length=100)
    limit: int = Field(default=10, ge=1, le=20)
    type: Literal["all", "categories", "locations", "items"] = "all"


class Suggestion(BaseModel):
    type: Literal["category", "location", "item", "tag"]
    value: str
    display: str
    count: int = 0
    icon: str | None = None
