# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the marketplace business logic:
# - models/: Pydantic schemas for request validation
# - services/: Table-level operations and ownership rules
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable without an HTTP client.
# =============================================================================
