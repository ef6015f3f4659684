# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the Lendify web application:
# - main.py: App entry point, middleware setup, router mounting
# - config.py: Environment variable loading and settings
# - exceptions.py: Error taxonomy and the error envelope
# - auth/: Supabase JWT verification
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# marketplace rules to the core/ package.
# =============================================================================
