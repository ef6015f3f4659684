# =============================================================================
# tests/test_agreements_api.py - Rental Agreement Workflow Tests
# =============================================================================
# draft -> sent -> signed, plus the preview endpoint and its template
# fallback. AI calls are patched out.
# =============================================================================

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from app.exceptions import AIGenerationError
from tests.conftest import BOOKING_ID, OUTSIDER_ID, OWNER_ID, RENTER_ID

AGREEMENTS = "/api/v1/agreements"
SIGNATURE = {"signature_data": "data:image/png;base64,iVBORw0KGgo=", "agreed_to_terms": True}


@pytest.fixture
def agreement(marketplace):
    """A sent agreement for the seeded booking, open for another week."""
    expires = datetime.now(timezone.utc) + timedelta(days=7)
    row, = marketplace.seed("rental_agreements", {
        "booking_id": BOOKING_ID,
        "agreement_text": "RENTAL AGREEMENT",
        "status": "sent",
        "created_by": OWNER_ID,
        "signed_by_owner": False,
        "signed_by_renter": False,
        "expires_at": expires.isoformat(),
    })
    return row


def _sign(client, login, user_id, agreement_id):
    login(user_id)
    return client.post(f"{AGREEMENTS}/{agreement_id}/sign", json=SIGNATURE)


class TestCreateAgreement:
    """Tests for POST /agreements."""

    def test_owner_creates_draft(self, client, marketplace, login):
        login(OWNER_ID)

        with patch("lib.ai_client.generate_rental_agreement", return_value="AGREEMENT TEXT"):
            response = client.post(AGREEMENTS, json={"bookingId": BOOKING_ID, "lateFeePerDay": 7.5})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "draft"
        assert data["agreement_text"] == "AGREEMENT TEXT"
        assert data["late_fee_per_day"] == 7.5
        assert data["signed_by_owner"] is False

    def test_renter_cannot_create(self, client, marketplace, login):
        login(RENTER_ID)

        response = client.post(AGREEMENTS, json={"booking_id": BOOKING_ID})

        assert response.status_code == 403
        assert marketplace.rows("rental_agreements") == []

    def test_one_agreement_per_booking(self, client, agreement, login):
        login(OWNER_ID)

        with patch("lib.ai_client.generate_rental_agreement", return_value="AGREEMENT TEXT"):
            response = client.post(AGREEMENTS, json={"booking_id": BOOKING_ID})

        assert response.status_code == 409
        assert response.json()["details"]["agreement_id"] == agreement["id"]

    def test_generation_failure_stores_nothing(self, client, marketplace, login):
        login(OWNER_ID)

        with patch(
            "lib.ai_client.generate_rental_agreement",
            side_effect=AIGenerationError("No response from AI model"),
        ):
            response = client.post(AGREEMENTS, json={"booking_id": BOOKING_ID})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate rental agreement. Please try again."
        assert marketplace.rows("rental_agreements") == []


class TestGeneratePreview:
    """Tests for POST /agreements/generate."""

    def test_falls_back_to_template(self, client, marketplace, login):
        login(RENTER_ID)

        with patch(
            "lib.ai_client.generate_rental_agreement",
            side_effect=AIGenerationError("No response from AI model"),
        ):
            response = client.post(
                f"{AGREEMENTS}/generate",
                json={"booking_id": BOOKING_ID, "late_fee_per_day": 5, "custom_terms": "No smoking."},
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["source"] == "template"
        assert "$5.00 per day" in data["agreement_text"]
        assert "No smoking." in data["agreement_text"]
        assert marketplace.rows("rental_agreements") == []

    def test_outsider_rejected(self, client, marketplace, login):
        login(OUTSIDER_ID)

        response = client.post(f"{AGREEMENTS}/generate", json={"booking_id": BOOKING_ID})

        assert response.status_code == 403


class TestSendAgreement:
    """Tests for POST /agreements/{id}/send."""

    def test_send_notifies_renter(self, client, agreement, marketplace, login):
        marketplace.get("rental_agreements", agreement["id"])["status"] = "draft"
        login(OWNER_ID)

        response = client.post(f"{AGREEMENTS}/{agreement['id']}/send")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "sent"
        stored = marketplace.get("rental_agreements", agreement["id"])
        assert stored["status"] == "sent"
        assert stored["expires_at"]
        messages = marketplace.rows("messages")
        assert len(messages) == 1
        assert messages[0]["recipient_id"] == RENTER_ID
        assert messages[0]["sender_id"] == OWNER_ID

    def test_cannot_resend(self, client, agreement, login):
        login(OWNER_ID)

        response = client.post(f"{AGREEMENTS}/{agreement['id']}/send")

        assert response.status_code == 400

    def test_renter_cannot_send(self, client, agreement, marketplace, login):
        marketplace.get("rental_agreements", agreement["id"])["status"] = "draft"
        login(RENTER_ID)

        response = client.post(f"{AGREEMENTS}/{agreement['id']}/send")

        assert response.status_code == 403


class TestSignAgreement:
    """Tests for POST /agreements/{id}/sign."""

    def test_first_signature_keeps_sent(self, client, agreement, marketplace, login):
        response = _sign(client, login, RENTER_ID, agreement["id"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["signed_by"] == "renter"
        assert data["fully_executed"] is False
        stored = marketplace.get("rental_agreements", agreement["id"])
        assert stored["status"] == "sent"
        assert stored["signed_by_renter"] is True
        assert stored["renter_signature_data"]["agreed_to_terms"] is True
        assert stored["renter_signature_data"]["user_agent"] == "testclient"

    def test_both_signatures_confirm_booking(self, client, agreement, marketplace, login):
        _sign(client, login, RENTER_ID, agreement["id"])
        response = _sign(client, login, OWNER_ID, agreement["id"])

        assert response.status_code == 200
        assert response.json()["data"]["fully_executed"] is True
        stored = marketplace.get("rental_agreements", agreement["id"])
        assert stored["status"] == "signed"
        assert stored["agreed_at"]
        assert marketplace.get("bookings", BOOKING_ID)["status"] == "confirmed"

    def test_cannot_sign_twice(self, client, agreement, login):
        _sign(client, login, RENTER_ID, agreement["id"])
        response = _sign(client, login, RENTER_ID, agreement["id"])

        assert response.status_code == 400
        assert response.json()["error"] == "Agreement already signed by renter"

    def test_outsider_cannot_sign(self, client, agreement, login):
        response = _sign(client, login, OUTSIDER_ID, agreement["id"])

        assert response.status_code == 403

    def test_outsider_cannot_read(self, client, agreement, login):
        login(OUTSIDER_ID)

        response = client.get(f"{AGREEMENTS}/{agreement['id']}")

        assert response.status_code == 403

    def test_draft_cannot_be_signed(self, client, agreement, marketplace, login):
        marketplace.get("rental_agreements", agreement["id"])["status"] = "draft"

        response = _sign(client, login, RENTER_ID, agreement["id"])

        assert response.status_code == 400
        assert response.json()["details"]["status"] == "draft"

    def test_expired_window(self, client, agreement, marketplace, login):
        stored = marketplace.get("rental_agreements", agreement["id"])
        stored["expires_at"] = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()

        response = _sign(client, login, RENTER_ID, agreement["id"])

        assert response.status_code == 400
        assert response.json()["error"] == "Agreement has expired"
        assert stored["status"] == "expired"
        assert stored["signed_by_renter"] is False


class TestListAndDelete:
    def test_parties_see_agreement(self, client, agreement, login):
        login(RENTER_ID)

        response = client.get(AGREEMENTS)

        assert [a["id"] for a in response.json()["data"]] == [agreement["id"]]

    def test_booking_agreements_route(self, client, agreement, login):
        login(OWNER_ID)

        response = client.get(f"/api/v1/bookings/{BOOKING_ID}/agreements")

        assert len(response.json()["data"]) == 1

    def test_only_drafts_can_be_deleted(self, client, agreement, marketplace, login):
        login(OWNER_ID)

        assert client.delete(f"{AGREEMENTS}/{agreement['id']}").status_code == 400

        marketplace.get("rental_agreements", agreement["id"])["status"] = "draft"
        assert client.delete(f"{AGREEMENTS}/{agreement['id']}").status_code == 200
        assert marketplace.rows("rental_agreements") == []
