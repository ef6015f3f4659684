# =============================================================================
# core/models/analytics.py - Personal Analytics Schemas
# =============================================================================

from typing import Literal

from pydantic import BaseModel, Field

TIMEFRAME_MONTHS = {"1m": 1, "3m": 3, "6m": 6, "1y": 12}


class AnalyticsQuery(BaseModel):
    timeframe: Literal["1m", "3m", "6m", "1y"] = "6m"

    @property
    def months(self) -> int:
        return TIMEFRAME_MONTHS[self.timeframe]


class UserStats(BaseModel):
    total_rentals: int = 0
    total_spent: int = 0
    total_savings: int = 0
    avg_rental_price: int = 0
    savings_rate: int = Field(default=0, description="Savings as a percentage of estimated purchase cost")


class CategoryUsage(BaseModel):
    category: str
    count: int


class MonthlySpend(BaseModel):
    month: str
    amount: int


class RentalPatterns(BaseModel):
    favorite_categories: list[CategoryUsage] = Field(default_factory=list)
    monthly_spending: list[MonthlySpend] = Field(default_factory=list)
    avg_rental_duration: int = 0


class SearchTerm(BaseModel):
    term: str
    count: int


class SearchInsights(BaseModel):
    total_searches: int = 0
    top_search_terms: list[SearchTerm] = Field(default_factory=list)
    search_to_booking_ratio: int = 0


class PersonalAnalytics(BaseModel):
    user_stats: UserStats
    rental_patterns: RentalPatterns
    search_insights: SearchInsights
    metadata: dict
