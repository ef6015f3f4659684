# =============================================================================
# core/services/pricing_service.py - Daily Price Suggestions
# =============================================================================
# Suggests a daily rental price for a new listing from the active listings
# already in its category.
#
#   comparables   up to 100 newest active listings, same category and condition
#   suggestion    market average x condition multiplier, blended 50/50 with the
#                 average of any listings the owner picked as comparable
#   no market     category baseline x condition multiplier, `fallback: true`
#
# Prices are aggregated with pandas.
# =============================================================================

import logging
import math
from datetime import datetime
from typing import Any
from uuid import UUID

import pandas as pd

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now, utc_now_iso
from core.models.ai import (
    MarketAnalysis,
    PriceDistribution,
    PriceRange,
    PriceSuggestionRequest,
    PricingSuggestion,
    SeasonalAdjustment,
)
from core.models.listing import ItemCondition, ListingStatus
from app.exceptions import BadRequestError

logger = logging.getLogger(__name__)

MAX_COMPARABLES = 100

CONDITION_MULTIPLIERS = {
    ItemCondition.NEW: 1.2,
    ItemCondition.LIKE_NEW: 1.1,
    ItemCondition.GOOD: 1.0,
    ItemCondition.FAIR: 0.85,
    ItemCondition.POOR: 0.7,
}

# Without market data the spread between conditions is wider
FALLBACK_CONDITION_MULTIPLIERS = {
    ItemCondition.NEW: 1.3,
    ItemCondition.LIKE_NEW: 1.15,
    ItemCondition.GOOD: 1.0,
    ItemCondition.FAIR: 0.8,
    ItemCondition.POOR: 0.6,
}

CATEGORY_BASE_PRICES = {
    "tools": 15,
    "electronics": 25,
    "furniture": 20,
    "vehicles": 45,
    "sporting-goods": 18,
    "musical-instruments": 30,
    "cameras": 35,
    "kitchen": 12,
    "outdoor": 22,
    "gaming": 20,
}
DEFAULT_BASE_PRICE = 20

# May through September
SUMMER_MONTHS = {5, 6, 7, 8, 9}

SEASONAL_CATEGORIES = {
    "outdoor": (1.15, 0.9, "Summer (May-September)", "Winter (October-April)"),
    "sporting-goods": (1.1, 0.95, "Spring/Summer", "Fall/Winter"),
}


def _round(value: float) -> int:
    """Round half up, as prices are displayed."""
    return int(math.floor(float(value) + 0.5))


def confidence_score(comparable_count: int, request: PriceSuggestionRequest) -> int:
    """1-10; more comparables and a fuller request raise confidence."""
    score = 0
    if comparable_count >= 20:
        score += 4
    elif comparable_count >= 10:
        score += 3
    elif comparable_count >= 5:
        score += 2
    elif comparable_count >= 1:
        score += 1

    if request.photos:
        score += 1
    if request.description and len(request.description) > 50:
        score += 1
    if request.comparable_listings:
        score += 1
    return min(10, max(1, score))


def pricing_recommendations(
    suggested: int,
    market_average: float,
    condition: ItemCondition,
    confidence: int,
) -> list[str]:
    recommendations = []

    if suggested > market_average * 1.2:
        recommendations.append(
            "Price is above market average - consider highlighting unique features to justify premium pricing"
        )
    elif suggested < market_average * 0.8:
        recommendations.append(
            "Price is below market average - you may be able to increase pricing for better returns"
        )
    else:
        recommendations.append("Price is well-aligned with market average")

    if condition in (ItemCondition.NEW, ItemCondition.LIKE_NEW):
        recommendations.append("Premium condition allows for higher pricing - emphasize quality in your listing")
    elif condition in (ItemCondition.FAIR, ItemCondition.POOR):
        recommendations.append("Competitive pricing recommended due to condition - highlight value proposition")

    if confidence < 5:
        recommendations.append("Limited market data - monitor initial responses and adjust pricing accordingly")

    recommendations.append("Consider offering weekly/monthly discounts to attract longer rentals")
    return recommendations


def seasonal_adjustment(category_key: str, now: datetime | None = None) -> SeasonalAdjustment:
    now = now or utc_now()
    seasonal = SEASONAL_CATEGORIES.get(category_key)
    if seasonal is None:
        return SeasonalAdjustment(
            current_modifier=1.0,
            peak_season="Year-round demand",
            low_season="Consistent pricing",
        )

    peak_modifier, low_modifier, peak_season, low_season = seasonal
    return SeasonalAdjustment(
        current_modifier=peak_modifier if now.month in SUMMER_MONTHS else low_modifier,
        peak_season=peak_season,
        low_season=low_season,
    )


def market_suggestion(
    prices: pd.Series,
    request: PriceSuggestionRequest,
    category_key: str,
    picked_prices: pd.Series | None = None,
) -> PricingSuggestion:
    """Suggestion from the comparable listings' daily prices (non-empty)."""
    ordered = prices.astype(float).sort_values().reset_index(drop=True)
    count = len(ordered)
    average = ordered.mean()
    median = ordered.iloc[count // 2]

    suggested = _round(average * CONDITION_MULTIPLIERS[request.condition])
    if picked_prices is not None and not picked_prices.empty:
        suggested = _round((suggested + picked_prices.astype(float).mean()) / 2)

    confidence = confidence_score(count, request)

    factors = [
        f"{count} comparable listings analyzed",
        f"Condition: {request.condition.value}",
        "Market average pricing",
        "Category-specific factors",
    ]
    if picked_prices is not None and not picked_prices.empty:
        factors.append(f"{len(picked_prices)} specifically selected comparables")

    return PricingSuggestion(
        suggested_price=suggested,
        confidence_score=confidence,
        price_range=PriceRange(min=_round(suggested * 0.8), max=_round(suggested * 1.25)),
        market_analysis=MarketAnalysis(
            average_price=_round(average),
            median_price=_round(median),
            price_distribution=PriceDistribution(
                low=_round(ordered.iloc[int(count * 0.25)]),
                medium=_round(median),
                high=_round(ordered.iloc[int(count * 0.75)]),
            ),
            comparable_count=count,
        ),
        factors_considered=factors,
        recommendations=pricing_recommendations(suggested, average, request.condition, confidence),
        seasonal_adjustments=seasonal_adjustment(category_key),
    )


def fallback_suggestion(request: PriceSuggestionRequest, category_key: str) -> PricingSuggestion:
    """Category baseline pricing for a category with no active listings."""
    base = CATEGORY_BASE_PRICES.get(category_key, DEFAULT_BASE_PRICE)
    suggested = _round(base * FALLBACK_CONDITION_MULTIPLIERS[request.condition])

    return PricingSuggestion(
        suggested_price=suggested,
        confidence_score=3,
        price_range=PriceRange(min=_round(suggested * 0.7), max=_round(suggested * 1.4)),
        market_analysis=MarketAnalysis(
            average_price=base,
            median_price=base,
            price_distribution=PriceDistribution(
                low=_round(base * 0.7),
                medium=base,
                high=_round(base * 1.3),
            ),
            comparable_count=0,
        ),
        factors_considered=[
            "Category baseline pricing",
            f"Condition: {request.condition.value}",
            "Industry standard multipliers",
        ],
        recommendations=[
            "Limited market data available - consider researching competitor pricing",
            "Start with suggested price and adjust based on demand",
            "Monitor booking requests to optimize pricing",
        ],
        fallback=True,
    )


class PricingService:
    """Daily price suggestions for listing owners."""

    @staticmethod
    def comparable_prices(request: PriceSuggestionRequest) -> pd.Series:
        client = SupabaseClient.get_client()
        rows = (
            client.table("listings")
            .select("price_per_day")
            .eq("category_id", str(request.category_id))
            .eq("status", ListingStatus.ACTIVE.value)
            .eq("condition", request.condition.value)
            .order("created_at", desc=True)
            .limit(MAX_COMPARABLES)
            .execute()
        ).data or []
        return pd.Series([row["price_per_day"] for row in rows if row.get("price_per_day") is not None])

    @staticmethod
    def picked_prices(request: PriceSuggestionRequest) -> pd.Series:
        if not request.comparable_listings:
            return pd.Series([], dtype=float)

        client = SupabaseClient.get_client()
        rows = (
            client.table("listings")
            .select("price_per_day")
            .in_("id", [str(listing_id) for listing_id in request.comparable_listings])
            .eq("status", ListingStatus.ACTIVE.value)
            .execute()
        ).data or []
        return pd.Series([row["price_per_day"] for row in rows if row.get("price_per_day") is not None])

    @staticmethod
    def _log_usage(user_id: str | UUID, request: PriceSuggestionRequest, suggested_price: int) -> None:
        client = SupabaseClient.get_client()
        try:
            client.table("ai_usage_logs").insert({
                "user_id": normalize_uuid(user_id),
                "action": "price_suggestion",
                "metadata": {
                    "category_id": str(request.category_id),
                    "condition": request.condition.value,
                    "suggested_price": suggested_price,
                },
                "success": True,
                "created_at": utc_now_iso(),
            }).execute()
        except Exception as e:
            logger.warning(f"Failed to log price suggestion: {e}")

    @staticmethod
    def suggest_price(user_id: str | UUID, request: PriceSuggestionRequest) -> dict[str, Any]:
        """
        Suggest a daily price for an item.

        Returns:
            {"category": {...}, "condition", "location", "pricing": PricingSuggestion}

        Raises:
            BadRequestError: If the category doesn't exist
        """
        category = SupabaseClient.fetch_by_id("categories", request.category_id, columns="id, name, slug")
        if not category:
            raise BadRequestError("Invalid category ID", details={"category_id": str(request.category_id)})

        category_key = (category.get("slug") or category.get("name") or "").lower()

        prices = PricingService.comparable_prices(request)
        if prices.empty:
            pricing = fallback_suggestion(request, category_key)
        else:
            pricing = market_suggestion(prices, request, category_key, PricingService.picked_prices(request))

        PricingService._log_usage(user_id, request, pricing.suggested_price)
        logger.info(
            f"Price suggestion for user {user_id}: {pricing.suggested_price}/day "
            f"from {pricing.market_analysis.comparable_count} comparables"
        )

        return {
            "category": {"id": category["id"], "name": category.get("name"), "slug": category.get("slug")},
            "condition": request.condition.value,
            "location": request.location.model_dump(),
            "pricing": pricing.model_dump(mode="json"),
        }
