# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        listing_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        listing_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def same_id(a: Any, b: Any) -> bool:
    """Compare two ids that may be UUID objects or strings."""
    if a is None or b is None:
        return False
    return str(a) == str(b)


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a PostgREST timestamp into an aware datetime.

    Naive values are assumed to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Pagination
# =============================================================================

def page_range(page: int, limit: int) -> tuple[int, int]:
    """Inclusive (start, end) row offsets for PostgREST .range()."""
    offset = (page - 1) * limit
    return offset, offset + limit - 1

