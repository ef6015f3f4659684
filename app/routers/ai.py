# =============================================================================
# app/routers/ai.py - AI Listing Assistance
# =============================================================================
# Listing copy generation and daily price suggestions. Both degrade to
# template output (`fallback: true`) instead of failing.
# =============================================================================

import logging

from fastapi import APIRouter

from app.dependencies import CurrentUser
from core.models import GenerateContentRequest, PriceSuggestionRequest, success_response
from core.services import PricingService
from lib.ai_client import generate_listing_content

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate-content")
async def generate_content(payload: GenerateContentRequest, user: CurrentUser):
    """
    Generate a title, description or tag list for a listing.

    Provider failures return template copy with `fallback: true` rather
    than an error.
    """
    result = generate_listing_content(
        payload.type.value,
        payload.context.model_dump(mode="json", exclude_none=True),
        tone=payload.tone,
        length=payload.length,
    )
    logger.info(f"Generated {payload.type.value} for user {user.id} fallback={result.get('fallback')}")
    return success_response(result, message="Content generated successfully")


@router.post("/price-suggestions")
async def price_suggestions(payload: PriceSuggestionRequest, user: CurrentUser):
    """
    Suggest a daily price from active listings in the same category.

    A category with no comparable listings gets baseline pricing with
    `fallback: true` and a low confidence score.
    """
    result = PricingService.suggest_price(user.id, payload)
    return success_response(result, message="Pricing suggestions generated successfully")
