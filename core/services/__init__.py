# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .listing_service import ListingService
from .booking_service import BookingService
from .agreement_service import AgreementService
from .review_service import ReviewService
from .message_service import MessageService
from .profile_service import ProfileService
from .category_service import CategoryService
from .storage_service import StorageService
from .search_service import SearchService
from .analytics_service import AnalyticsService
from .pricing_service import PricingService

__all__ = [
    "ListingService",
    "BookingService",
    "AgreementService",
    "ReviewService",
    "MessageService",
    "ProfileService",
    "CategoryService",
    "StorageService",
    "SearchService",
    "AnalyticsService",
    "PricingService",
]
