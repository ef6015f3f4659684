# =============================================================================
# tests/test_pricing.py - Price Suggestion Tests
# =============================================================================
# Market-based suggestions, the baseline fallback, and POST /ai/price-suggestions.
# =============================================================================

from datetime import datetime, timezone

import pandas as pd

from core.models import PriceSuggestionRequest
from core.services.pricing_service import (
    confidence_score,
    fallback_suggestion,
    market_suggestion,
    seasonal_adjustment,
)
from tests.conftest import CATEGORY_ID, LISTING_ID, OWNER_ID

PRICE_SUGGESTIONS = "/api/v1/ai/price-suggestions"


def _request(**overrides):
    body = {
        "category_id": CATEGORY_ID,
        "condition": "like_new",
        "location": {"lat": 37.77, "lng": -122.42},
    }
    body.update(overrides)
    return body


def _seed_comparables(marketplace, *prices, condition="like_new", status="active", category_id=CATEGORY_ID):
    for price in prices:
        marketplace.seed("listings", {
            "owner_id": OWNER_ID,
            "category_id": category_id,
            "title": f"Camera at {price}",
            "price_per_day": price,
            "condition": condition,
            "status": status,
        })


class TestMarketSuggestion:
    def test_condition_multiplier_and_distribution(self):
        request = PriceSuggestionRequest(**_request())

        pricing = market_suggestion(pd.Series([30, 45, 60]), request, "cameras")

        assert pricing.suggested_price == 50
        assert pricing.market_analysis.average_price == 45
        assert pricing.market_analysis.median_price == 45
        assert pricing.market_analysis.price_distribution.low == 30
        assert pricing.market_analysis.price_distribution.high == 60
        assert pricing.price_range.min == 40
        assert pricing.price_range.max == 63
        assert pricing.fallback is False

    def test_picked_comparables_blend_in(self):
        request = PriceSuggestionRequest(**_request(comparable_listings=[LISTING_ID]))

        pricing = market_suggestion(pd.Series([30, 45, 60]), request, "cameras", pd.Series([45.0]))

        assert pricing.suggested_price == 48
        assert "1 specifically selected comparables" in pricing.factors_considered

    def test_recommendations(self):
        request = PriceSuggestionRequest(**_request(condition="poor"))

        pricing = market_suggestion(pd.Series([100, 100]), request, "cameras")

        assert pricing.suggested_price == 70
        assert pricing.recommendations[0].startswith("Price is below market average")
        assert any("Competitive pricing" in r for r in pricing.recommendations)


class TestFallbackSuggestion:
    def test_category_baseline(self):
        request = PriceSuggestionRequest(**_request(condition="poor"))

        pricing = fallback_suggestion(request, "cameras")

        assert pricing.suggested_price == 21
        assert pricing.confidence_score == 3
        assert pricing.market_analysis.comparable_count == 0
        assert pricing.fallback is True

    def test_unknown_category_uses_default(self):
        request = PriceSuggestionRequest(**_request(condition="good"))

        assert fallback_suggestion(request, "board-games").suggested_price == 20


class TestConfidenceAndSeason:
    def test_confidence_grows_with_detail(self):
        bare = PriceSuggestionRequest(**_request())
        detailed = PriceSuggestionRequest(**_request(
            photos=["https://cdn.example.com/a.jpg"],
            description="A" * 60,
            comparable_listings=[LISTING_ID],
        ))

        assert confidence_score(0, bare) == 1
        assert confidence_score(25, bare) == 4
        assert confidence_score(25, detailed) == 7

    def test_outdoor_peaks_in_summer(self):
        july = datetime(2030, 7, 1, tzinfo=timezone.utc)
        january = datetime(2030, 1, 1, tzinfo=timezone.utc)

        assert seasonal_adjustment("outdoor", july).current_modifier == 1.15
        assert seasonal_adjustment("outdoor", january).current_modifier == 0.9
        assert seasonal_adjustment("cameras", july).current_modifier == 1.0


class TestPriceSuggestionEndpoint:
    """Tests for POST /ai/price-suggestions."""

    def test_uses_active_listings_in_category(self, client, marketplace, login):
        _seed_comparables(marketplace, 30, 60)
        _seed_comparables(marketplace, 500, status="draft")
        _seed_comparables(marketplace, 900, category_id="77777777-7777-4777-8777-777777777777")
        login(OWNER_ID)

        response = client.post(PRICE_SUGGESTIONS, json=_request())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["category"]["slug"] == "cameras"
        assert data["condition"] == "like_new"
        assert data["pricing"]["market_analysis"]["comparable_count"] == 3
        assert data["pricing"]["suggested_price"] == 50
        assert data["pricing"]["fallback"] is False

        logged, = marketplace.rows("ai_usage_logs")
        assert logged["action"] == "price_suggestion"
        assert logged["user_id"] == OWNER_ID
        assert logged["metadata"]["suggested_price"] == 50

    def test_falls_back_without_comparables(self, client, marketplace, login):
        login(OWNER_ID)

        response = client.post(PRICE_SUGGESTIONS, json=_request(condition="poor"))

        assert response.status_code == 200
        pricing = response.json()["data"]["pricing"]
        assert pricing["fallback"] is True
        assert pricing["suggested_price"] == 21

    def test_usage_log_failure_is_ignored(self, client, marketplace, login):
        marketplace.fail_inserts.add("ai_usage_logs")
        login(OWNER_ID)

        response = client.post(PRICE_SUGGESTIONS, json=_request())

        assert response.status_code == 200

    def test_unknown_category(self, client, marketplace, login):
        login(OWNER_ID)

        response = client.post(
            PRICE_SUGGESTIONS,
            json=_request(category_id="99999999-9999-4999-8999-999999999999"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid category ID"

    def test_location_required(self, client, marketplace, login):
        login(OWNER_ID)

        response = client.post(PRICE_SUGGESTIONS, json={"category_id": CATEGORY_ID, "condition": "good"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_requires_login(self, client, marketplace):
        response = client.post(PRICE_SUGGESTIONS, json=_request())

        assert response.status_code == 401
