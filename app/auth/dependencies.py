# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies the Supabase access token sent as `Authorization: Bearer <jwt>`
# and turns it into a request-scoped AuthUser.
#
# Supports both:
# - ES256 (Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/bookings")
#   async def list_bookings(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

import logging
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.auth.models import AuthUser

logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_user, not by HTTPBearer,
# so every auth failure is a 401 in the error envelope
security = HTTPBearer(auto_error=False)

TOKEN_AUDIENCE = "authenticated"

_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_jwks_url() -> str:
    return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch the project's JWKS, cached for JWKS_CACHE_TTL seconds."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = now
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except Exception as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # A stale key set beats rejecting every asymmetric token
        return _jwks_cache or {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Pick the key and algorithm to verify a token with.

    Returns:
        Tuple of (key, algorithm)
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and build the AuthUser.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no
            usable subject
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(token, signing_key, algorithms=[algorithm], audience=TOKEN_AUDIENCE)
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_uuid, email=payload.get("email"), role=payload.get("role"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    The authenticated caller.

    Raises:
        HTTPException: 401 when no bearer token is sent or it doesn't verify
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Authentication required")

    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthUser]:
    """
    The caller if a valid token was sent, otherwise None.

    Used by public routes whose output depends on who is asking
    (an owner can see their own draft listing).
    """
    if credentials is None or not credentials.credentials:
        return None

    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        return None
