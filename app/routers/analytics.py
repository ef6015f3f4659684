# =============================================================================
# app/routers/analytics.py - Personal Analytics
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import CurrentUser
from core.models import success_response
from core.models.analytics import AnalyticsQuery
from core.services import AnalyticsService

router = APIRouter()


@router.get("/personal")
async def personal_analytics(
    params: Annotated[AnalyticsQuery, Query()],
    user: CurrentUser,
):
    """The caller's renting history summarised over a timeframe (1m, 3m, 6m, 1y)."""
    return success_response(AnalyticsService.personal(user.id, params))
