# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for request validation:
# - common.py: Success envelope and pagination
# - listing.py: Listing write payloads and browse filters
# - booking.py: Booking payloads and the status transition table
# - agreement.py: Rental agreement payloads and signature records
# - review.py, message.py, profile.py, category.py, ai.py
#
# These models define the "contract" between API and clients.
# =============================================================================

from .common import Pagination, success_response

from .listing import (
    ItemCondition,
    ListingCreate,
    ListingFilters,
    ListingStatus,
    ListingUpdate,
    Location,
)

from .booking import (
    ALLOWED_TRANSITIONS,
    BLOCKING_STATUSES,
    OWNER_ONLY_TRANSITIONS,
    BookingCreate,
    BookingFilters,
    BookingStatus,
    BookingUpdate,
    can_transition,
)

from .agreement import (
    AgreementCreate,
    AgreementStatus,
    DeliveryMethod,
    PartyRole,
    SignatureRecord,
    SignatureRequest,
    SignResult,
)

from .review import ReviewCreate, ReviewFilters
from .message import ConversationSummary, MessageCreate, MessageFilters
from .profile import PUBLIC_PROFILE_COLUMNS, ProfileStats, ProfileUpdate
from .category import CategoryCreate
from .ai import (
    ContentContext,
    ContentType,
    GenerateContentRequest,
    PriceSuggestionRequest,
    PricingSuggestion,
)

__all__ = [
    # Common
    "Pagination",
    "success_response",
    # Listing
    "ItemCondition",
    "ListingCreate",
    "ListingFilters",
    "ListingStatus",
    "ListingUpdate",
    "Location",
    # Booking
    "ALLOWED_TRANSITIONS",
    "BLOCKING_STATUSES",
    "OWNER_ONLY_TRANSITIONS",
    "BookingCreate",
    "BookingFilters",
    "BookingStatus",
    "BookingUpdate",
    "can_transition",
    # Agreement
    "AgreementCreate",
    "AgreementStatus",
    "DeliveryMethod",
    "PartyRole",
    "SignatureRecord",
    "SignatureRequest",
    "SignResult",
    # Review / Message / Profile / Category / AI
    "ReviewCreate",
    "ReviewFilters",
    "ConversationSummary",
    "MessageCreate",
    "MessageFilters",
    "PUBLIC_PROFILE_COLUMNS",
    "ProfileStats",
    "ProfileUpdate",
    "CategoryCreate",
    "ContentContext",
    "ContentType",
    "GenerateContentRequest",
    "PriceSuggestionRequest",
    "PricingSuggestion",
]
