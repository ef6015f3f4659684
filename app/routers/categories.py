# =============================================================================
# app/routers/categories.py - Category Endpoints
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import CurrentUser, OptionalUser
from core.models import CategoryCreate, ListingFilters, Pagination, success_response
from core.services import CategoryService, ListingService

router = APIRouter()

CategoryId = Annotated[UUID, Path(description="Category UUID")]


@router.get("")
async def list_categories(
    parent_id: Annotated[UUID | None, Query(description="Children of this category; roots when omitted")] = None,
    include_children: Annotated[bool, Query()] = False,
    include_counts: Annotated[bool, Query()] = False,
):
    categories = CategoryService.list_categories(
        parent_id=parent_id,
        include_children=include_children,
        include_counts=include_counts,
    )
    return success_response(categories)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, user: CurrentUser):
    category = CategoryService.create_category(payload)
    return success_response(category, message="Category created successfully")


@router.get("/{category_id}")
async def get_category(category_id: CategoryId):
    return success_response(CategoryService.get_category(category_id))


@router.get("/{category_id}/listings")
async def category_listings(
    category_id: CategoryId,
    filters: Annotated[ListingFilters, Query()],
    user: OptionalUser,
):
    """Active listings in a category, with the usual browse filters."""
    CategoryService.get_category(category_id)
    scoped = filters.model_copy(update={"category": str(category_id)})
    listings, total = ListingService.list_listings(scoped, viewer_id=user.id if user else None)
    return success_response(
        listings,
        pagination=Pagination.from_counts(filters.page, filters.limit, total),
    )
