# =============================================================================
# tests/test_search_api.py - Search & Suggestion Tests
# =============================================================================

from core.models.search import Suggestion
from core.services.search_service import _area_from_address, rank_suggestions
from tests.conftest import LISTING_ID, OUTSIDER_ID, OWNER_ID, RENTER_ID

SEARCH = "/api/v1/search"


class TestSearch:
    """Tests for GET /search."""

    def test_matches_title_and_records_search(self, client, marketplace, login):
        login(RENTER_ID)

        response = client.get(SEARCH, params={"query": "canon", "max_price": 100})

        assert response.status_code == 200
        body = response.json()
        assert [item["id"] for item in body["data"]] == [LISTING_ID]
        assert body["message"] == "Found 1 listings"

        recorded, = marketplace.rows("search_analytics")
        assert recorded["query"] == "canon"
        assert recorded["results_count"] == 1
        assert recorded["user_id"] == RENTER_ID
        assert recorded["filters"]["max_price"] == 100.0
        assert "page" not in recorded["filters"]

    def test_anonymous_search(self, client, marketplace):
        response = client.get(SEARCH, params={"query": "tripod"})

        assert response.json()["data"] == []
        assert marketplace.rows("search_analytics")[0]["user_id"] is None

    def test_status_filter_hides_other_owners_drafts(self, client, marketplace, login):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"
        login(OUTSIDER_ID)

        response = client.get(SEARCH, params={"query": "canon", "status": "draft"})

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_status_filter_anonymous(self, client, marketplace):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"

        response = client.get(SEARCH, params={"query": "canon", "status": "draft"})

        assert response.json()["data"] == []
        assert marketplace.rows("search_analytics")[0]["results_count"] == 0

    def test_owner_searches_own_drafts(self, client, marketplace, login):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"
        login(OWNER_ID)

        response = client.get(SEARCH, params={"query": "canon", "status": "draft"})

        assert [item["id"] for item in response.json()["data"]] == [LISTING_ID]

    def test_analytics_failure_does_not_fail_search(self, client, marketplace):
        marketplace.fail_inserts.add("search_analytics")

        response = client.get(SEARCH, params={"query": "canon"})

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1

    def test_availability_window_hides_booked_listings(self, client, marketplace):
        marketplace.seed("bookings", {
            "listing_id": LISTING_ID, "renter_id": OUTSIDER_ID, "owner_id": OWNER_ID,
            "start_date": "2030-08-10", "end_date": "2030-08-12", "total_price": 90, "status": "confirmed",
        })

        booked = client.get(SEARCH, params={"available_from": "2030-08-11", "available_to": "2030-08-15"})
        free = client.get(SEARCH, params={"available_from": "2030-08-13", "available_to": "2030-08-15"})

        assert booked.json()["data"] == []
        assert len(free.json()["data"]) == 1

    def test_pending_booking_does_not_hide_listing(self, client, marketplace):
        response = client.get(SEARCH, params={"available_from": "2030-06-02", "available_to": "2030-06-03"})

        assert len(response.json()["data"]) == 1

    def test_reversed_window_rejected(self, client, marketplace):
        response = client.get(SEARCH, params={"available_from": "2030-08-15", "available_to": "2030-08-11"})

        assert response.status_code == 400


class TestSuggestions:
    """Tests for GET /search/suggestions."""

    def test_short_query_returns_nothing(self, client, marketplace):
        response = client.get(f"{SEARCH}/suggestions", params={"query": "c"})

        assert response.json()["data"] == []
        assert response.json()["message"] == "Query too short for suggestions"

    def test_mixed_sources(self, client, marketplace):
        response = client.get(f"{SEARCH}/suggestions", params={"query": "cam"})

        types = {s["type"] for s in response.json()["data"]}
        assert types == {"category", "item", "tag"}

    def test_exact_category_first(self, client, marketplace):
        response = client.get(f"{SEARCH}/suggestions", params={"query": "Cameras", "type": "categories"})

        first = response.json()["data"][0]
        assert first == {"type": "category", "value": "cameras", "display": "Cameras", "count": 1, "icon": "camera"}

    def test_location_from_address(self, client, marketplace):
        response = client.get(f"{SEARCH}/suggestions", params={"query": "francisco", "type": "locations"})

        assert response.json()["data"] == [
            {"type": "location", "value": "San Francisco", "display": "San Francisco", "count": 1}
        ]

    def test_area_helper(self):
        assert _area_from_address("12 Market Street, San Francisco, CA") == "San Francisco"
        assert _area_from_address("Somewhere") is None

    def test_ranking(self):
        ranked = rank_suggestions(
            [
                Suggestion(type="item", value="b", display="Tent stakes", count=1),
                Suggestion(type="tag", value="tent", display="#tent", count=4),
                Suggestion(type="category", value="tent", display="Tent", count=2),
            ],
            "tent",
        )

        assert [s.display for s in ranked] == ["Tent", "#tent", "Tent stakes"]
