# =============================================================================
# core/services/listing_service.py - Listing Business Logic
# =============================================================================
# Handles listing CRUD, browse filters, and visibility rules.
#
# Visibility:
# - Non-active listings are only visible to their owner (404 otherwise)
# - Browsing defaults to status=active
# - Deleting is a soft archive, refused while confirmed/active bookings exist
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, page_range, parse_timestamp, same_id, utc_now_iso
from core.models.booking import BLOCKING_STATUSES
from core.models.listing import ListingCreate, ListingFilters, ListingStatus, ListingUpdate
from app.exceptions import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

LISTING_COLUMNS = (
    "*, category:categories(id, name, slug, icon), "
    "owner:profiles!listings_owner_id_fkey(id, full_name, avatar_url, rating, verified)"
)


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
        return True
    except ValueError:
        return False


def _featured_score(listing: dict[str, Any], booking_count: int, now: datetime) -> float:
    """
    Rank a listing for the featured carousel (0-100).

    Owner trust, booking activity and listing completeness count most.
    """
    owner = listing.get("owner") or {}
    score = 0.0
    if owner.get("verified"):
        score += 20
    if owner.get("rating"):
        score += (float(owner["rating"]) / 5) * 15
    score += min(booking_count * 5, 25)
    score += min(len(listing.get("photos") or []) * 2, 10)
    score += min(len(listing.get("description") or "") / 100, 10)

    created_at = parse_timestamp(listing.get("created_at"))
    if created_at is not None:
        age_days = (now - created_at).days
        if age_days <= 30:
            score += max(5 - (age_days / 30) * 5, 0)
    return score


class ListingService:
    """
    Service for listing operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def resolve_category_id(category: str) -> str | None:
        """
        Turn a category UUID or slug into a category id.

        Returns None when a slug matches nothing.
        """
        if _is_uuid(category):
            return category
        row = SupabaseClient.fetch_first("categories", {"slug": category}, columns="id")
        return row["id"] if row else None

    @staticmethod
    def _apply_filters(
        query,
        filters: ListingFilters,
        search: str | None = None,
        viewer_id: str | UUID | None = None,
    ):
        status = filters.status or ListingStatus.ACTIVE
        query = query.eq("status", status.value)
        if status != ListingStatus.ACTIVE:
            # Non-active listings are private to their owner
            query = query.eq("owner_id", normalize_uuid(viewer_id))

        if filters.location:
            query = query.ilike("address", f"%{filters.location}%")
        if filters.min_price is not None:
            query = query.gte("price_per_day", filters.min_price)
        if filters.max_price is not None:
            query = query.lte("price_per_day", filters.max_price)
        if filters.condition:
            query = query.eq("condition", filters.condition.value)
        if filters.tag_list:
            query = query.overlaps("tags", filters.tag_list)
        if search:
            term = search.replace(",", " ").strip()
            query = query.or_(f"title.ilike.%{term}%,description.ilike.%{term}%")
        return query

    @staticmethod
    def nearby_listing_ids(latitude: float, longitude: float, radius_km: float) -> list[str]:
        """Ids of listings within radius_km, via the listings_within_radius RPC."""
        client = SupabaseClient.get_client()
        response = client.rpc(
            "listings_within_radius",
            {"lat": latitude, "lng": longitude, "radius_meters": radius_km * 1000},
        ).execute()
        return [row["id"] for row in (response.data or []) if row.get("id")]

    @staticmethod
    def list_listings(
        filters: ListingFilters,
        search: str | None = None,
        exclude_ids: list[str] | None = None,
        viewer_id: str | UUID | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Browse listings with filters and pagination.

        Args:
            filters: Validated query filters
            search: Optional free text matched against title and description
            exclude_ids: Listing ids to leave out of the results
            viewer_id: Signed-in caller; a non-active status filter only
                matches this user's own listings

        Returns:
            Tuple of (listings for this page, total matching count)
        """
        status = filters.status or ListingStatus.ACTIVE
        if status != ListingStatus.ACTIVE and viewer_id is None:
            return [], 0

        client = SupabaseClient.get_client()

        query = client.table("listings").select(LISTING_COLUMNS, count="exact")
        query = ListingService._apply_filters(query, filters, search, viewer_id)

        if filters.category:
            category_id = ListingService.resolve_category_id(filters.category)
            if category_id is None:
                return [], 0
            query = query.eq("category_id", category_id)

        if filters.has_geo:
            nearby = ListingService.nearby_listing_ids(
                filters.latitude, filters.longitude, filters.radius
            )
            if not nearby:
                return [], 0
            query = query.in_("id", nearby)

        if exclude_ids:
            query = query.not_.in_("id", exclude_ids)

        start, end = page_range(filters.page, filters.limit)
        response = (
            query
            .order(filters.sort_by, desc=filters.sort_order == "desc")
            .range(start, end)
            .execute()
        )
        return response.data or [], response.count or 0

    @staticmethod
    def get_listing(
        listing_id: str | UUID,
        viewer_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Get a listing by ID.

        Raises:
            NotFoundError: If the listing doesn't exist, or isn't active and
                the viewer isn't its owner
        """
        listing = SupabaseClient.fetch_by_id("listings", listing_id, columns=LISTING_COLUMNS)
        if not listing:
            raise NotFoundError("Listing", normalize_uuid(listing_id))

        if listing.get("status") != ListingStatus.ACTIVE.value and not same_id(listing.get("owner_id"), viewer_id):
            # Don't reveal that the listing exists
            raise NotFoundError("Listing", normalize_uuid(listing_id))

        return listing

    @staticmethod
    def _require_category(category_id: UUID) -> None:
        if not SupabaseClient.fetch_by_id("categories", category_id, columns="id"):
            raise BadRequestError("Invalid category ID", details={"category_id": str(category_id)})

    @staticmethod
    def create_listing(owner_id: str | UUID, payload: ListingCreate) -> dict[str, Any]:
        """
        Create a listing owned by the caller.

        Raises:
            BadRequestError: If the category doesn't exist
        """
        ListingService._require_category(payload.category_id)

        row = payload.to_row()
        row["owner_id"] = normalize_uuid(owner_id)

        listing = SupabaseClient.insert_row("listings", row)
        logger.info(f"Created listing: {listing.get('id')} for owner: {owner_id}")
        return listing

    @staticmethod
    def _get_owned(listing_id: str | UUID, user_id: str | UUID, action: str) -> dict[str, Any]:
        listing = SupabaseClient.fetch_by_id("listings", listing_id, columns="id, owner_id, status")
        if not listing:
            raise NotFoundError("Listing", normalize_uuid(listing_id))
        if not same_id(listing.get("owner_id"), user_id):
            raise AuthorizationError(f"You can only {action} your own listings")
        return listing

    @staticmethod
    def update_listing(
        listing_id: str | UUID,
        user_id: str | UUID,
        payload: ListingUpdate,
    ) -> dict[str, Any]:
        """
        Apply a partial update to a listing the caller owns.

        Raises:
            NotFoundError: If listing doesn't exist
            AuthorizationError: If caller isn't the owner
        """
        listing = ListingService._get_owned(listing_id, user_id, "update")

        if payload.category_id is not None:
            ListingService._require_category(payload.category_id)

        changes = payload.to_row()
        if not changes:
            return listing

        changes["updated_at"] = utc_now_iso()
        updated = SupabaseClient.update_row("listings", listing_id, changes)
        logger.info(f"Updated listing: {listing_id} fields={sorted(changes)}")
        return updated or listing

    @staticmethod
    def archive_listing(listing_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Soft-delete a listing by archiving it.

        Raises:
            ConflictError: If confirmed or active bookings exist
        """
        ListingService._get_owned(listing_id, user_id, "delete")

        client = SupabaseClient.get_client()
        active = (
            client.table("bookings")
            .select("id")
            .eq("listing_id", normalize_uuid(listing_id))
            .in_("status", BLOCKING_STATUSES)
            .execute()
        )
        if active.data:
            raise ConflictError(
                "Cannot delete listing with active bookings",
                details={"active_bookings": len(active.data)},
            )

        archived = SupabaseClient.update_row(
            "listings",
            listing_id,
            {"status": ListingStatus.ARCHIVED.value, "updated_at": utc_now_iso()},
        )
        logger.info(f"Archived listing: {listing_id}")
        return archived or {"id": normalize_uuid(listing_id), "status": ListingStatus.ARCHIVED.value}

    @staticmethod
    def featured_listings(limit: int = 12, category: str | None = None) -> list[dict[str, Any]]:
        """
        Highest-scoring active listings.

        Candidates are the 50 newest active listings; each is scored on
        owner trust, booking activity and completeness.
        """
        client = SupabaseClient.get_client()

        query = client.table("listings").select(LISTING_COLUMNS).eq("status", ListingStatus.ACTIVE.value)
        if category:
            category_id = ListingService.resolve_category_id(category)
            if category_id is None:
                return []
            query = query.eq("category_id", category_id)
        candidates = query.order("created_at", desc=True).limit(50).execute().data or []
        if not candidates:
            return []

        bookings = (
            client.table("bookings")
            .select("listing_id, status")
            .in_("listing_id", [c["id"] for c in candidates])
            .in_("status", ["completed", "active", "confirmed"])
            .execute()
        ).data or []
        counts: dict[str, int] = {}
        for booking in bookings:
            key = str(booking.get("listing_id"))
            counts[key] = counts.get(key, 0) + 1

        now = datetime.now(timezone.utc)
        ranked = sorted(
            candidates,
            key=lambda c: _featured_score(c, counts.get(str(c["id"]), 0), now),
            reverse=True,
        )

        featured = []
        for listing in ranked[:limit]:
            owner = listing.get("owner") or {}
            featured.append({
                **listing,
                "stats": {
                    "bookings_count": counts.get(str(listing["id"]), 0),
                    "avg_rating": owner.get("rating") or 0,
                },
            })
        return featured

    @staticmethod
    def listings_for_user(
        user_id: str | UUID,
        viewer_id: str | UUID | None = None,
        status: ListingStatus | None = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "updated_at",
        sort_order: str = "desc",
    ) -> tuple[list[dict[str, Any]], int]:
        """
        A user's listings.

        Other people only see active listings; the owner sees every status
        and may filter by one.
        """
        if not SupabaseClient.fetch_by_id("profiles", user_id, columns="id"):
            raise NotFoundError("User", normalize_uuid(user_id))

        client = SupabaseClient.get_client()
        query = (
            client.table("listings")
            .select("*, category:categories(id, name, slug, icon)", count="exact")
            .eq("owner_id", normalize_uuid(user_id))
        )

        if not same_id(user_id, viewer_id):
            query = query.eq("status", ListingStatus.ACTIVE.value)
        elif status:
            query = query.eq("status", status.value)

        start, end = page_range(page, limit)
        response = query.order(sort_by, desc=sort_order == "desc").range(start, end).execute()
        listings = response.data or []

        if listings:
            active = (
                client.table("bookings")
                .select("listing_id")
                .in_("listing_id", [item["id"] for item in listings])
                .in_("status", BLOCKING_STATUSES)
                .execute()
            ).data or []
            booked = {str(b.get("listing_id")) for b in active}
            for listing in listings:
                listing["has_active_bookings"] = str(listing["id"]) in booked

        return listings, response.count or 0
