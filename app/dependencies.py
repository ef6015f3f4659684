# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.auth import AuthUser, get_current_user, get_current_user_optional


def client_ip(request: Request) -> str:
    """
    Best-effort client address for audit records.

    Proxies put the original client first in X-Forwarded-For.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"


# Type aliases for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
OptionalUser = Annotated[AuthUser | None, Depends(get_current_user_optional)]
ClientIP = Annotated[str, Depends(client_ip)]
UserAgent = Annotated[str, Depends(user_agent)]
