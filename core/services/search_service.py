# =============================================================================
# core/services/search_service.py - Listing Search & Suggestions
# =============================================================================
# Text search reuses the listing browse filters and adds:
# - a free-text match on title/description
# - an availability window that drops listings with overlapping
#   confirmed/active bookings
# Every search is recorded in search_analytics; a failed write is logged
# and never fails the search itself.
# =============================================================================

import logging
from collections import Counter
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.models.booking import BLOCKING_STATUSES
from core.models.listing import ListingStatus
from core.models.search import SearchFilters, Suggestion, SuggestionQuery
from core.services.listing_service import ListingService

logger = logging.getLogger(__name__)

PER_SOURCE_LIMIT = 5
TAG_SAMPLE_SIZE = 100
MAX_TAG_SUGGESTIONS = 3


def _area_from_address(address: str) -> str | None:
    """The city/area part of an address: the second-to-last comma segment."""
    parts = [p.strip() for p in address.split(",")]
    if len(parts) < 2:
        return None
    return parts[-2] or None


def rank_suggestions(suggestions: list[Suggestion], term: str) -> list[Suggestion]:
    """Exact display matches first, then by count, then alphabetically."""
    return sorted(
        suggestions,
        key=lambda s: (s.display.lower() != term, -s.count, s.display.lower()),
    )


class SearchService:
    """Service for search operations."""

    @staticmethod
    def booked_listing_ids(available_from, available_to) -> list[str]:
        """Listings with a confirmed/active booking overlapping the window."""
        client = SupabaseClient.get_client()
        rows = (
            client.table("bookings")
            .select("listing_id")
            .in_("status", BLOCKING_STATUSES)
            .lte("start_date", available_to.isoformat())
            .gte("end_date", available_from.isoformat())
            .execute()
        ).data or []
        return sorted({str(r["listing_id"]) for r in rows if r.get("listing_id")})

    @staticmethod
    def record_search(
        query: str | None,
        results_count: int,
        filters: dict[str, Any],
        user_id: str | UUID | None,
    ) -> None:
        try:
            client = SupabaseClient.get_client()
            client.table("search_analytics").insert({
                "query": query or "",
                "results_count": results_count,
                "filters": filters,
                "user_id": normalize_uuid(user_id) if user_id else None,
            }).execute()
        except Exception as e:
            logger.warning(f"Failed to record search analytics: {e}")

    @staticmethod
    def search(
        filters: SearchFilters,
        user_id: str | UUID | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Search listings.

        Returns:
            Tuple of (listings for this page, total matching count)
        """
        exclude = None
        if filters.has_window:
            exclude = SearchService.booked_listing_ids(filters.available_from, filters.available_to)

        term = filters.query.strip() if filters.query else None
        listings, total = ListingService.list_listings(
            filters, search=term or None, exclude_ids=exclude, viewer_id=user_id,
        )

        SearchService.record_search(term, total, filters.analytics_filters(), user_id)
        logger.debug(f"Search '{term}' matched {total} listings")
        return listings, total

    @staticmethod
    def _category_suggestions(term: str, limit: int) -> list[Suggestion]:
        client = SupabaseClient.get_client()
        categories = (
            client.table("categories")
            .select("id, name, slug, icon")
            .ilike("name", f"%{term}%")
            .limit(limit)
            .execute()
        ).data or []

        suggestions = []
        for category in categories:
            count = SupabaseClient.count_rows(
                "listings",
                {"category_id": category["id"], "status": ListingStatus.ACTIVE.value},
            )
            suggestions.append(Suggestion(
                type="category",
                value=category["slug"],
                display=category["name"],
                count=count,
                icon=category.get("icon"),
            ))
        return suggestions

    @staticmethod
    def _location_suggestions(term: str, limit: int) -> list[Suggestion]:
        client = SupabaseClient.get_client()
        rows = (
            client.table("listings")
            .select("address")
            .eq("status", ListingStatus.ACTIVE.value)
            .ilike("address", f"%{term}%")
            .limit(limit)
            .execute()
        ).data or []

        areas: list[str] = []
        for row in rows:
            area = _area_from_address(row.get("address") or "")
            if area and term in area.lower() and area not in areas:
                areas.append(area)

        suggestions = []
        for area in areas[:PER_SOURCE_LIMIT]:
            response = (
                client.table("listings")
                .select("id", count="exact")
                .eq("status", ListingStatus.ACTIVE.value)
                .ilike("address", f"%{area}%")
                .execute()
            )
            suggestions.append(Suggestion(type="location", value=area, display=area, count=response.count or 0))
        return suggestions

    @staticmethod
    def _item_suggestions(term: str, limit: int) -> list[Suggestion]:
        client = SupabaseClient.get_client()
        items = (
            client.table("listings")
            .select("id, title, price_per_day")
            .eq("status", ListingStatus.ACTIVE.value)
            .or_(f"title.ilike.%{term}%,description.ilike.%{term}%")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        ).data or []

        suggestions = [
            Suggestion(
                type="item",
                value=item["title"],
                display=f"{item['title']} - ${item['price_per_day']}/day",
                count=1,
            )
            for item in items
        ]

        tagged = (
            client.table("listings")
            .select("tags")
            .eq("status", ListingStatus.ACTIVE.value)
            .limit(TAG_SAMPLE_SIZE)
            .execute()
        ).data or []
        tag_counts = Counter(
            tag for row in tagged for tag in (row.get("tags") or []) if term in tag.lower()
        )
        for tag, count in tag_counts.most_common(MAX_TAG_SUGGESTIONS):
            suggestions.append(Suggestion(type="tag", value=tag, display=f"#{tag}", count=count))
        return suggestions

    @staticmethod
    def suggestions(params: SuggestionQuery) -> list[dict[str, Any]]:
        """
        Autocomplete suggestions for a partial query.

        Queries shorter than two characters return nothing.
        """
        term = params.query.strip().lower()
        if len(term) < 2:
            return []

        per_source = min(params.limit, PER_SOURCE_LIMIT)
        found: list[Suggestion] = []
        if params.type in ("all", "categories"):
            found.extend(SearchService._category_suggestions(term, per_source))
        if params.type in ("all", "locations"):
            found.extend(SearchService._location_suggestions(term, per_source))
        if params.type in ("all", "items"):
            found.extend(SearchService._item_suggestions(term, per_source))

        ranked = rank_suggestions(found, term)[:params.limit]
        return [s.model_dump(exclude_none=True) for s in ranked]
