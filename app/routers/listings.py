# =============================================================================
# app/routers/listings.py - Listing Endpoints
# =============================================================================
# Browsing and reading listings is public; an optional token lets owners
# see their own non-active listings. Writes require authentication.
#
# Static paths (/featured, /user/{id}) are declared before /{listing_id}.
# =============================================================================

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import CurrentUser, OptionalUser
from core.models import (
    ListingCreate,
    ListingFilters,
    ListingStatus,
    ListingUpdate,
    Pagination,
    success_response,
)
from core.services import ListingService

router = APIRouter()


@router.get("")
async def list_listings(
    filters: Annotated[ListingFilters, Query()],
    user: OptionalUser,
):
    """
    Browse listings.

    Defaults to active listings, newest first. Any other status only
    returns the signed-in caller's own listings. Supports category (id or
    slug), location text, price range, condition, comma-separated tags and
    a latitude/longitude/radius (km) search.
    """
    listings, total = ListingService.list_listings(filters, viewer_id=user.id if user else None)
    return success_response(
        listings,
        pagination=Pagination.from_counts(filters.page, filters.limit, total),
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_listing(payload: ListingCreate, user: CurrentUser):
    """Create a listing owned by the caller."""
    listing = ListingService.create_listing(user.id, payload)
    return success_response(listing, message="Listing created successfully")


@router.get("/featured")
async def featured_listings(
    limit: Annotated[int, Query(ge=1, le=50)] = 12,
    category: Annotated[str | None, Query(description="Category id or slug")] = None,
):
    """Top-ranked active listings for the home page."""
    return success_response(ListingService.featured_listings(limit=limit, category=category))


@router.get("/user/{user_id}")
async def listings_for_user(
    user_id: Annotated[UUID, Path(description="Owner's user id")],
    viewer: OptionalUser,
    status_filter: Annotated[ListingStatus | None, Query(alias="status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    sort_by: Annotated[Literal["created_at", "updated_at", "price_per_day", "title"], Query()] = "updated_at",
    sort_order: Annotated[Literal["asc", "desc"], Query()] = "desc",
):
    """
    A user's listings.

    Others see only active listings; the owner sees all and may filter by
    status.
    """
    listings, total = ListingService.listings_for_user(
        user_id,
        viewer_id=viewer.id if viewer else None,
        status=status_filter,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return success_response(listings, pagination=Pagination.from_counts(page, limit, total))


@router.get("/{listing_id}")
async def get_listing(
    listing_id: Annotated[UUID, Path(description="Listing UUID")],
    viewer: OptionalUser,
):
    listing = ListingService.get_listing(listing_id, viewer_id=viewer.id if viewer else None)
    return success_response(listing)


@router.put("/{listing_id}")
async def update_listing(
    listing_id: Annotated[UUID, Path(description="Listing UUID")],
    payload: ListingUpdate,
    user: CurrentUser,
):
    """Partially update a listing. Owner only."""
    listing = ListingService.update_listing(listing_id, user.id, payload)
    return success_response(listing, message="Listing updated successfully")


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: Annotated[UUID, Path(description="Listing UUID")],
    user: CurrentUser,
):
    """
    Archive a listing. Owner only.

    Refused with 409 while the listing has confirmed or active bookings.
    """
    ListingService.archive_listing(listing_id, user.id)
    return success_response({"id": str(listing_id)}, message="Listing deleted successfully")
