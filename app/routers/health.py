# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Probes for load balancers and container orchestration. These are plain
# status documents, not wrapped in the success envelope.
#
#   /health        process is up, with environment and version
#   /health/ready  Supabase database and photo bucket reachable (503 if not)
#   /health/live   process is alive
# =============================================================================

import logging
from typing import Callable

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    version: str
    timestamp: str


class ChecksResponse(BaseModel):
    """Outcome of each dependency probe: "healthy" or "unhealthy: <reason>"."""
    database: str
    storage: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


# =============================================================================
# Probes
# =============================================================================

def _probe_database() -> None:
    SupabaseClient.get_client().table("listings").select("id").limit(1).execute()


def _probe_storage() -> None:
    SupabaseClient.get_client().storage.from_(settings.LISTING_PHOTOS_BUCKET).list()


def _run_probe(name: str, probe: Callable[[], None]) -> str:
    try:
        probe()
        return "healthy"
    except Exception as e:
        logger.warning(f"Readiness probe '{name}' failed: {e}")
        return f"unhealthy: {str(e)[:50]}"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        service=f"{settings.PLATFORM_NAME} API",
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
        timestamp=utc_now_iso(),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(response: Response):
    """
    Whether the API can serve traffic.

    Responds 503 with status "degraded" when the database or the photo
    bucket can't be reached, so load balancers stop routing here.
    """
    checks = ChecksResponse(
        database=_run_probe("database", _probe_database),
        storage=_run_probe("storage", _probe_storage),
    )
    ready = checks.database == "healthy" and checks.storage == "healthy"
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=utc_now_iso(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    return LivenessResponse(status="alive", timestamp=utc_now_iso())
