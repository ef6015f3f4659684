# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - ai_client.py: OpenAI-compatible text generation (agreements, listing copy)
# - utils.py: Shared utilities (UUID normalization, timestamps, paging)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, same_id

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "normalize_uuid",
    "same_id",
]
