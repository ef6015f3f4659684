# =============================================================================
# tests/test_auth.py - Token Verification & Health Tests
# =============================================================================
# Tokens are signed with the HS256 test secret from conftest.
# =============================================================================

import time
from unittest.mock import patch

from jose import jwt

from app.config import settings
from tests.conftest import OWNER_ID

ME = "/api/v1/auth/me"


def _token(**claims):
    payload = {
        "sub": OWNER_ID,
        "email": "owner@example.com",
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    payload.update(claims)
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestBearerTokens:
    """Tests for get_current_user via /auth/me and /auth/verify."""

    def test_valid_token(self, client, marketplace):
        response = client.get(ME, headers=_auth(_token()))

        assert response.status_code == 200
        assert response.json()["data"]["id"] == OWNER_ID

    def test_verify(self, client, marketplace):
        response = client.get("/api/v1/auth/verify", headers=_auth(_token()))

        assert response.json()["data"] == {"valid": True, "user_id": OWNER_ID, "email": "owner@example.com"}

    def test_missing_token(self, client, marketplace):
        response = client.get(ME)

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "AUTHENTICATION_ERROR"
        assert body["error"] == "Authentication required"

    def test_expired_token(self, client, marketplace):
        response = client.get(ME, headers=_auth(_token(exp=int(time.time()) - 60)))

        assert response.status_code == 401
        assert response.json()["error"] == "Token has expired"

    def test_wrong_secret(self, client, marketplace):
        token = jwt.encode(
            {"sub": OWNER_ID, "aud": "authenticated", "exp": int(time.time()) + 3600},
            "some-other-secret",
            algorithm="HS256",
        )

        response = client.get(ME, headers=_auth(token))

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    def test_wrong_audience(self, client, marketplace):
        response = client.get(ME, headers=_auth(_token(aud="anon")))

        assert response.status_code == 401

    def test_malformed_subject(self, client, marketplace):
        response = client.get(ME, headers=_auth(_token(sub="not-a-uuid")))

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token: malformed user ID"

    def test_optional_auth_ignores_bad_token(self, client, marketplace):
        response = client.get("/api/v1/listings", headers=_auth("garbage"))

        assert response.status_code == 200


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/v1/health")

        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "Lendify API"

    def test_ready_with_fake_backend(self, client, fake_db):
        response = client.get("/api/v1/health/ready")

        assert response.json()["status"] == "ready"

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/v1/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_not_ready_when_storage_down(self, client, fake_db):
        def broken_list(*args, **kwargs):
            raise RuntimeError("bucket missing")

        with patch("tests.fake_supabase.FakeBucket.list", broken_list):
            response = client.get("/api/v1/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "healthy"
        assert body["checks"]["storage"].startswith("unhealthy")
