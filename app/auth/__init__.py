# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# JWT-based authentication against Supabase Auth.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.post("/bookings")
#   async def create_booking(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import AuthUser

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "AuthUser",
]
