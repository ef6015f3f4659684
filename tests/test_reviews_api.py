# =============================================================================
# tests/test_reviews_api.py - Review Endpoint Tests
# =============================================================================

from tests.conftest import BOOKING_ID, OUTSIDER_ID, OWNER_ID, RENTER_ID

REVIEWS = "/api/v1/reviews"


def _review(**overrides):
    body = {"booking_id": BOOKING_ID, "reviewee_id": OWNER_ID, "rating": 5, "comment": "Spotless kit."}
    body.update(overrides)
    return body


class TestCreateReview:
    """Tests for POST /reviews."""

    def test_requires_completed_booking(self, client, marketplace, login):
        login(RENTER_ID)

        response = client.post(REVIEWS, json=_review())

        assert response.status_code == 400
        assert response.json()["error"] == "Reviews can only be created for completed bookings"

    def test_review_updates_rating(self, client, marketplace, login):
        marketplace.get("bookings", BOOKING_ID)["status"] = "completed"
        marketplace.seed("reviews", {"reviewer_id": OUTSIDER_ID, "reviewee_id": OWNER_ID, "rating": 4})
        login(RENTER_ID)

        response = client.post(REVIEWS, json=_review())

        assert response.status_code == 201
        assert response.json()["data"]["rating"] == 5
        assert marketplace.get("profiles", OWNER_ID)["rating"] == 4.5

    def test_one_review_per_booking(self, client, marketplace, login):
        marketplace.get("bookings", BOOKING_ID)["status"] = "completed"
        login(RENTER_ID)

        assert client.post(REVIEWS, json=_review()).status_code == 201
        response = client.post(REVIEWS, json=_review(rating=1))

        assert response.status_code == 409
        assert len(marketplace.rows("reviews")) == 1

    def test_reviewee_must_be_other_party(self, client, marketplace, login):
        marketplace.get("bookings", BOOKING_ID)["status"] = "completed"
        login(RENTER_ID)

        response = client.post(REVIEWS, json=_review(reviewee_id=RENTER_ID))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid reviewee for this booking"

    def test_outsider_cannot_review(self, client, marketplace, login):
        marketplace.get("bookings", BOOKING_ID)["status"] = "completed"
        login(OUTSIDER_ID)

        response = client.post(REVIEWS, json=_review())

        assert response.status_code == 403

    def test_rating_out_of_range(self, client, marketplace, login):
        login(RENTER_ID)

        response = client.post(REVIEWS, json=_review(rating=0))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestListReviews:
    def test_public_and_filtered(self, client, marketplace):
        marketplace.seed(
            "reviews",
            {"reviewer_id": RENTER_ID, "reviewee_id": OWNER_ID, "rating": 5},
            {"reviewer_id": OWNER_ID, "reviewee_id": RENTER_ID, "rating": 3},
        )

        response = client.get(REVIEWS, params={"reviewee_id": OWNER_ID})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["rating"] == 5
