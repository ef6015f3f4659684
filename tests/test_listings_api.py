# =============================================================================
# tests/test_listings_api.py - Listing Endpoint Tests
# =============================================================================
# Exercises /api/v1/listings against the in-memory Supabase fake.
# =============================================================================

from tests.conftest import CATEGORY_ID, LISTING_ID, OUTSIDER_ID, OWNER_ID

LISTINGS = "/api/v1/listings"


def _new_listing(**overrides):
    body = {
        "title": "Two-person tent",
        "description": "Lightweight backpacking tent, sleeps two.",
        "category_id": CATEGORY_ID,
        "price_per_day": 12.5,
        "condition": "good",
        "address": "1 Trail Road, Boulder, CO",
        "location": {"lat": 40.01, "lng": -105.27},
        "photos": ["https://cdn.example.com/tent.jpg"],
        "tags": ["camping", "tent"],
        "status": "active",
    }
    body.update(overrides)
    return body


class TestCreateListing:
    """Tests for POST /listings."""

    def test_invalid_price_rejected(self, client, marketplace, login):
        """A zero daily price is a 400 validation error, nothing is stored."""
        login(OWNER_ID)

        response = client.post(LISTINGS, json=_new_listing(price_per_day=0))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"
        assert any(d["field"] == "price_per_day" for d in body["details"])
        assert len(marketplace.rows("listings")) == 1

    def test_create_listing(self, client, marketplace, login):
        login(OWNER_ID)

        response = client.post(LISTINGS, json=_new_listing())

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["owner_id"] == OWNER_ID
        assert data["location"] == "POINT(-105.27 40.01)"

    def test_unknown_category_rejected(self, client, marketplace, login):
        login(OWNER_ID)

        response = client.post(LISTINGS, json=_new_listing(category_id="99999999-9999-4999-8999-999999999999"))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid category ID"

    def test_requires_authentication(self, client, marketplace):
        response = client.post(LISTINGS, json=_new_listing())

        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_ERROR"


class TestBrowseListings:
    """Tests for GET /listings."""

    def test_defaults_to_active(self, client, marketplace):
        marketplace.seed("listings", {
            "owner_id": OWNER_ID, "category_id": CATEGORY_ID, "title": "Draft drone",
            "description": "Not published yet", "price_per_day": 30, "status": "draft",
        })

        response = client.get(LISTINGS)

        assert response.status_code == 200
        body = response.json()
        assert [item["id"] for item in body["data"]] == [LISTING_ID]
        assert body["pagination"]["total"] == 1

    def test_filter_by_category_slug(self, client, marketplace):
        response = client.get(LISTINGS, params={"category": "cameras"})

        assert response.json()["pagination"]["total"] == 1

    def test_unknown_slug_matches_nothing(self, client, marketplace):
        response = client.get(LISTINGS, params={"category": "boats"})

        assert response.json()["data"] == []

    def test_price_and_tag_filters(self, client, marketplace):
        assert client.get(LISTINGS, params={"max_price": 40}).json()["data"] == []
        assert len(client.get(LISTINGS, params={"tags": "tent,camera"}).json()["data"]) == 1

    def test_geo_filter_uses_radius_rpc(self, client, marketplace):
        captured = {}

        def within_radius(params):
            captured.update(params)
            return []

        marketplace.rpc_handlers["listings_within_radius"] = within_radius

        response = client.get(LISTINGS, params={"latitude": 37.7, "longitude": -122.4, "radius": 5})

        assert response.json()["data"] == []
        assert captured == {"lat": 37.7, "lng": -122.4, "radius_meters": 5000}

    def test_invalid_sort_is_400(self, client, marketplace):
        response = client.get(LISTINGS, params={"sort_by": "owner_id"})

        assert response.status_code == 400


class TestListingVisibility:
    """Non-active listings are hidden from everyone but their owner."""

    def test_draft_hidden_from_others(self, client, marketplace, login):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"
        login(OUTSIDER_ID)

        response = client.get(f"{LISTINGS}/{LISTING_ID}")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_browse_by_draft_status_hides_other_owners(self, client, marketplace, login):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"
        login(OUTSIDER_ID)

        response = client.get(LISTINGS, params={"status": "draft"})

        assert response.status_code == 200
        assert response.json()["data"] == []
        assert response.json()["pagination"]["total"] == 0

    def test_browse_by_draft_status_anonymous(self, client, marketplace):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"

        response = client.get(LISTINGS, params={"status": "inactive"})
        assert response.json()["data"] == []

        response = client.get(LISTINGS, params={"status": "draft"})
        assert response.json()["data"] == []

    def test_browse_by_draft_status_shows_own(self, client, marketplace, login):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"
        login(OWNER_ID)

        response = client.get(LISTINGS, params={"status": "draft"})

        assert [item["id"] for item in response.json()["data"]] == [LISTING_ID]

    def test_draft_visible_to_owner(self, client, marketplace, login):
        marketplace.get("listings", LISTING_ID)["status"] = "draft"
        login(OWNER_ID)

        response = client.get(f"{LISTINGS}/{LISTING_ID}")

        assert response.status_code == 200

    def test_user_listings_show_owner_everything(self, client, marketplace, login):
        marketplace.seed("listings", {
            "owner_id": OWNER_ID, "category_id": CATEGORY_ID, "title": "Draft drone",
            "description": "Not published yet", "price_per_day": 30, "status": "draft",
            "updated_at": "2020-01-01T00:00:00+00:00",
        })

        login(OUTSIDER_ID)
        assert client.get(f"{LISTINGS}/user/{OWNER_ID}").json()["pagination"]["total"] == 1

        login(OWNER_ID)
        owner_view = client.get(f"{LISTINGS}/user/{OWNER_ID}").json()
        assert owner_view["pagination"]["total"] == 2
        assert all("has_active_bookings" in item for item in owner_view["data"])


class TestUpdateAndArchive:
    """Tests for PUT and DELETE /listings/{id}."""

    def test_only_owner_can_update(self, client, marketplace, login):
        login(OUTSIDER_ID)

        response = client.put(f"{LISTINGS}/{LISTING_ID}", json={"title": "Mine now"})

        assert response.status_code == 403
        assert response.json()["error"] == "You can only update your own listings"

    def test_owner_updates(self, client, marketplace, login):
        login(OWNER_ID)

        response = client.put(f"{LISTINGS}/{LISTING_ID}", json={"price_per_day": 50})

        assert response.status_code == 200
        assert marketplace.get("listings", LISTING_ID)["price_per_day"] == 50

    def test_delete_archives(self, client, marketplace, login):
        login(OWNER_ID)

        response = client.delete(f"{LISTINGS}/{LISTING_ID}")

        assert response.status_code == 200
        assert marketplace.get("listings", LISTING_ID)["status"] == "archived"

    def test_delete_blocked_by_confirmed_booking(self, client, marketplace, login):
        marketplace.rows("bookings")[0]["status"] = "confirmed"
        login(OWNER_ID)

        response = client.delete(f"{LISTINGS}/{LISTING_ID}")

        assert response.status_code == 409
        assert response.json()["error"] == "Cannot delete listing with active bookings"
        assert marketplace.get("listings", LISTING_ID)["status"] == "active"


class TestFeatured:
    def test_featured_includes_stats(self, client, marketplace):
        response = client.get(f"{LISTINGS}/featured")

        assert response.status_code == 200
        featured = response.json()["data"]
        assert featured[0]["id"] == LISTING_ID
        assert featured[0]["stats"]["bookings_count"] == 0
