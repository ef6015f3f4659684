# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Lendify API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.exceptions import (
    ErrorCode,
    LendifyException,
    http_exception_handler,
    lendify_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    agreements,
    ai,
    analytics,
    bookings,
    categories,
    health,
    listings,
    messages,
    reviews,
    search,
    upload,
    users,
)
from app.auth import routes as auth_routes
from app.rate_limit import RATE_LIMITS

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration and shutdown."""
    logger.info(f"Starting {settings.PLATFORM_NAME} API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info(f"Shutting down {settings.PLATFORM_NAME} API")


# Create FastAPI application
app = FastAPI(
    title="Lendify API",
    description="""
## Peer-to-Peer Rental Marketplace API

Owners list items, renters book them for a date range, and both sides sign
a rental agreement before the hand-over.

### Booking Flow

1. **Browse / Search** - find an active listing
2. **Book** - request dates; price must match days x daily rate
3. **Agreement** - the owner drafts (AI-written) and sends the agreement
4. **Sign** - both parties sign; the booking becomes confirmed
5. **Review** - after completion each side reviews the other

### Response Envelope

```json
{"success": true, "data": {...}, "message": "...", "pagination": {...}}
{"success": false, "error": "...", "code": "NOT_FOUND", "details": {...}}
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Verify tokens and read the caller's profile"},
        {"name": "Listings", "description": "Browse and manage rental listings"},
        {"name": "Search", "description": "Full-text search and autocomplete"},
        {"name": "Bookings", "description": "Reservations and their lifecycle"},
        {"name": "Agreements", "description": "Rental agreements and e-signature"},
        {"name": "Messages", "description": "Direct messages between users"},
        {"name": "Reviews", "description": "Ratings after completed bookings"},
        {"name": "Users", "description": "Profiles"},
        {"name": "Categories", "description": "Listing categories"},
        {"name": "Upload", "description": "Listing photo storage"},
        {"name": "AI", "description": "AI-generated listing copy"},
        {"name": "Analytics", "description": "Personal rental analytics"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(LendifyException, lendify_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    content = {
        "success": False,
        "error": "An unexpected error occurred",
        "code": ErrorCode.INTERNAL_ERROR,
    }
    if settings.DEBUG:
        content["details"] = {"type": type(exc).__name__, "message": str(exc)}
    return JSONResponse(status_code=500, content=content)


# =============================================================================
# Routers
# =============================================================================

# Each router is throttled per client IP and path (see app/rate_limit.py)
PUBLIC = [Depends(RATE_LIMITS["public"])]
AUTHENTICATED = [Depends(RATE_LIMITS["authenticated"])]

app.include_router(auth_routes.router, prefix=API_PREFIX, dependencies=AUTHENTICATED)
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(listings.router, prefix=f"{API_PREFIX}/listings", tags=["Listings"], dependencies=PUBLIC)
app.include_router(
    search.router, prefix=f"{API_PREFIX}/search", tags=["Search"],
    dependencies=[Depends(RATE_LIMITS["search"])],
)
app.include_router(bookings.router, prefix=f"{API_PREFIX}/bookings", tags=["Bookings"], dependencies=AUTHENTICATED)
app.include_router(
    agreements.router, prefix=f"{API_PREFIX}/agreements", tags=["Agreements"], dependencies=AUTHENTICATED,
)
app.include_router(messages.router, prefix=f"{API_PREFIX}/messages", tags=["Messages"], dependencies=AUTHENTICATED)
app.include_router(reviews.router, prefix=f"{API_PREFIX}/reviews", tags=["Reviews"], dependencies=PUBLIC)
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["Users"], dependencies=PUBLIC)
app.include_router(categories.router, prefix=f"{API_PREFIX}/categories", tags=["Categories"], dependencies=PUBLIC)
app.include_router(upload.router, prefix=f"{API_PREFIX}/upload", tags=["Upload"], dependencies=AUTHENTICATED)
app.include_router(ai.router, prefix=f"{API_PREFIX}/ai", tags=["AI"], dependencies=[Depends(RATE_LIMITS["ai"])])
app.include_router(
    analytics.router, prefix=f"{API_PREFIX}/analytics", tags=["Analytics"], dependencies=AUTHENTICATED,
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Lendify API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
