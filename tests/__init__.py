# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Lendify API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_*_api.py: Endpoint tests against an in-memory Supabase fake
# - test_ai_client.py / test_analytics.py: Library-level tests
#
# Run tests with: pytest
# =============================================================================
