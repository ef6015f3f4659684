# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - listings.py, search.py: Browsing, search and listing management
# - bookings.py: Reservations and their lifecycle
# - agreements.py: Rental agreement drafting, sending and e-signature
# - messages.py, reviews.py, users.py, categories.py
# - upload.py: Listing photo storage
# - ai.py: AI listing copy
# - analytics.py: Personal rental analytics
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import listings
from . import search
from . import bookings
from . import agreements
from . import messages
from . import reviews
from . import users
from . import categories
from . import upload
from . import ai
from . import analytics

__all__ = [
    "health",
    "listings",
    "search",
    "bookings",
    "agreements",
    "messages",
    "reviews",
    "users",
    "categories",
    "upload",
    "ai",
    "analytics",
]
