# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup and login happen client-side against Supabase Auth. These routes
# return who the bearer of a token is.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, TokenVerification
from core.models import success_response
from core.services import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me")
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Get the current user's profile.

    Falls back to a minimal profile built from the token when the profile
    row hasn't been created yet.
    """
    return success_response(ProfileService.get_own_profile(user.id, user.email))


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """Check that a stored token is still valid."""
    verification = TokenVerification(user_id=str(user.id), email=user.email)
    return success_response(verification.model_dump())
