# =============================================================================
# app/routers/search.py - Search Endpoints
# =============================================================================
# Public. A token, when present, attributes the search in search_analytics.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import OptionalUser
from core.models import Pagination, success_response
from core.models.search import SearchFilters, SuggestionQuery
from core.services import SearchService

router = APIRouter()


@router.get("")
async def search_listings(
    filters: Annotated[SearchFilters, Query()],
    user: OptionalUser,
):
    """
    Full-text search over listing titles and descriptions.

    Accepts every listing browse filter, plus available_from/available_to
    to hide listings already booked in that window.
    """
    listings, total = SearchService.search(filters, user_id=user.id if user else None)
    return success_response(
        listings,
        message=f"Found {total} listings",
        pagination=Pagination.from_counts(filters.page, filters.limit, total),
    )


@router.get("/suggestions")
async def search_suggestions(params: Annotated[SuggestionQuery, Query()]):
    """Autocomplete: categories, locations, items and tags."""
    suggestions = SearchService.suggestions(params)
    if not suggestions and len(params.query.strip()) < 2:
        return success_response([], message="Query too short for suggestions")
    return success_response(suggestions, message=f"Found {len(suggestions)} suggestions")
