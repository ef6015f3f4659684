# =============================================================================
# core/models/ai.py - AI Content Schemas
# =============================================================================

from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl

from .listing import ItemCondition, Location


class ContentType(str, Enum):
    TITLE = "title"
    DESCRIPTION = "description"
    TAGS = "tags"


class ContentContext(BaseModel):
    """What we know about the item being described."""

    category: str | None = None
    condition: ItemCondition | None = None
    price_range: str | None = None
    photos: list[HttpUrl] | None = None
    existing_content: str | None = Field(default=None, max_length=5000)


class GenerateContentRequest(BaseModel):
    """
    Body of POST /ai/generate-content.

    Example:
        {
            "type": "title",
            "context": {"category": "Camping", "condition": "good"},
            "tone": "casual"
        }
    """

    type: ContentType
    context: ContentContext = Field(default_factory=ContentContext)
    tone: Literal["professional", "casual", "friendly", "technical"] = "friendly"
    length: Literal["short", "medium", "long"] = "medium"


class PriceSuggestionRequest(BaseModel):
    """
    Body of POST /ai/price-suggestions.

    `comparable_listings` are listing ids the owner considers similar; their
    average is blended into the suggestion.
    """

    category_id: UUID
    condition: ItemCondition
    location: Location
    photos: list[HttpUrl] | None = None
    description: str | None = Field(default=None, max_length=5000)
    comparable_listings: list[UUID] | None = Field(default=None, max_length=20)


class PriceDistribution(BaseModel):
    low: int
    medium: int
    high: int


class MarketAnalysis(BaseModel):
    average_price: int
    median_price: int
    price_distribution: PriceDistribution
    comparable_count: int


class PriceRange(BaseModel):
    min: int
    max: int


class SeasonalAdjustment(BaseModel):
    current_modifier: float
    peak_season: str
    low_season: str


class PricingSuggestion(BaseModel):
    """Suggested daily price; confidence_score runs 1-10."""

    suggested_price: int
    confidence_score: int
    price_range: PriceRange
    market_analysis: MarketAnalysis
    factors_considered: list[str]
    recommendations: list[str]
    seasonal_adjustments: SeasonalAdjustment | None = None
    fallback: bool = False
