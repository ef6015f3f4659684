# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Swaps the Supabase singleton for an in-memory fake
# - A TestClient whose auth dependency can be pointed at any user
# - A small seeded marketplace: one category, an owner, a renter, an
#   outsider, an active listing and a pending booking
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from app.auth import AuthUser, get_current_user, get_current_user_optional
from app.main import app
from app.rate_limit import reset_rate_limits
from lib.supabase_client import SupabaseClient
from tests.fake_supabase import FakeSupabase


OWNER_ID = "11111111-1111-4111-8111-111111111111"
RENTER_ID = "22222222-2222-4222-8222-222222222222"
OUTSIDER_ID = "33333333-3333-4333-8333-333333333333"
CATEGORY_ID = "44444444-4444-4444-8444-444444444444"
LISTING_ID = "55555555-5555-4555-8555-555555555555"
BOOKING_ID = "66666666-6666-4666-8666-666666666666"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """Install an empty in-memory Supabase client for the test."""
    fake = FakeSupabase()
    previous = SupabaseClient._instance
    SupabaseClient._instance = fake
    yield fake
    SupabaseClient._instance = previous


@pytest.fixture
def marketplace(fake_db):
    """Seed profiles, a category, an active listing and a pending booking."""
    fake_db.seed(
        "profiles",
        {"id": OWNER_ID, "full_name": "Olivia Owner", "email": "owner@example.com",
         "rating": 4.5, "verified": True, "created_at": "2022-01-01T00:00:00+00:00"},
        {"id": RENTER_ID, "full_name": "Ravi Renter", "email": "renter@example.com",
         "rating": 0, "verified": False, "created_at": "2023-06-01T00:00:00+00:00"},
        {"id": OUTSIDER_ID, "full_name": "Omar Outsider", "email": "outsider@example.com",
         "rating": 0, "verified": False},
    )
    fake_db.seed(
        "categories",
        {"id": CATEGORY_ID, "name": "Cameras", "slug": "cameras", "icon": "camera", "parent_id": None},
    )
    fake_db.seed(
        "listings",
        {
            "id": LISTING_ID,
            "owner_id": OWNER_ID,
            "category_id": CATEGORY_ID,
            "title": "Canon EOS R5 Camera Kit",
            "description": "Full-frame mirrorless body with 24-105mm lens.",
            "price_per_day": 45.0,
            "deposit_amount": 200.0,
            "condition": "like_new",
            "address": "12 Market Street, San Francisco, CA",
            "photos": ["https://cdn.example.com/camera.jpg"],
            "tags": ["camera", "photography"],
            "status": "active",
        },
    )
    fake_db.seed(
        "bookings",
        {
            "id": BOOKING_ID,
            "listing_id": LISTING_ID,
            "renter_id": RENTER_ID,
            "owner_id": OWNER_ID,
            "start_date": "2030-06-01",
            "end_date": "2030-06-04",
            "total_price": 135.0,
            "status": "pending",
        },
    )
    return fake_db


@pytest.fixture
def client():
    """TestClient with auth overrides cleared afterwards."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login():
    """
    Authenticate subsequent requests as the given user id.

    Usage:
        login(OWNER_ID)
        client.get("/api/v1/bookings")
    """
    def _login(user_id: str, email: str | None = None):
        user = AuthUser(id=UUID(user_id), email=email)
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_current_user_optional] = lambda: user
        return user

    yield _login
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fresh_rate_limits():
    """Every test starts with empty request counters."""
    reset_rate_limits()
    yield
    reset_rate_limits()
