# =============================================================================
# app/routers/users.py - Profile Endpoints
# =============================================================================
# /users/profile (the caller) is declared before /users/{user_id}.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from app.dependencies import CurrentUser
from core.models import ProfileUpdate, success_response
from core.services import ProfileService

router = APIRouter()


@router.get("/profile")
async def get_my_profile(user: CurrentUser):
    return success_response(ProfileService.get_own_profile(user.id, user.email))


@router.put("/profile")
async def update_my_profile(payload: ProfileUpdate, user: CurrentUser):
    profile = ProfileService.update_profile(user.id, payload)
    return success_response(profile, message="Profile updated successfully")


@router.get("/{user_id}")
async def get_public_profile(
    user_id: Annotated[UUID, Path(description="User UUID")],
    include_stats: Annotated[bool, Query()] = False,
    include_reviews: Annotated[bool, Query()] = False,
):
    """
    Public profile.

    include_stats adds listing/rating/account-age figures; include_reviews
    adds the five most recent reviews received.
    """
    profile = ProfileService.get_public_profile(
        user_id,
        include_stats=include_stats,
        include_reviews=include_reviews,
    )
    return success_response(profile)
