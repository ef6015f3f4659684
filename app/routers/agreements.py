# =============================================================================
# app/routers/agreements.py - Rental Agreement Endpoints
# =============================================================================
# Agreement lifecycle: draft -> sent -> signed
#
#   POST /agreements              owner drafts the agreement (AI text)
#   POST /agreements/generate     preview text only, nothing stored
#   POST /agreements/{id}/send    owner sends it; signing window opens
#   POST /agreements/{id}/sign    each party signs once; the second
#                                 signature confirms the booking
#
# Only the booking's owner and renter may see or act on an agreement.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import ClientIP, CurrentUser, UserAgent
from core.models import AgreementCreate, SignatureRequest, success_response
from core.services import AgreementService

router = APIRouter()

AgreementId = Annotated[UUID, Path(description="Agreement UUID")]


@router.get("")
async def list_agreements(
    user: CurrentUser,
    booking_id: Annotated[UUID | None, Query(description="Only this booking's agreements")] = None,
):
    return success_response(AgreementService.list_agreements(user.id, booking_id=booking_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_agreement(payload: AgreementCreate, user: CurrentUser):
    """
    Draft an agreement for a booking. Listing owner only.

    The booking is (re)set to pending until both parties sign.
    """
    agreement = AgreementService.create_agreement(user.id, payload)
    return success_response(agreement, message="Rental agreement created successfully")


@router.post("/generate")
async def generate_agreement(payload: AgreementCreate, user: CurrentUser):
    """
    Preview agreement text for a booking without storing it.

    Falls back to the standard template when AI generation fails.
    """
    preview = AgreementService.generate_preview(user.id, payload)
    return success_response(preview, message="Agreement generated successfully")


@router.get("/{agreement_id}")
async def get_agreement(agreement_id: AgreementId, user: CurrentUser):
    return success_response(AgreementService.get_agreement(agreement_id, user.id))


@router.delete("/{agreement_id}")
async def delete_agreement(agreement_id: AgreementId, user: CurrentUser):
    """Delete a draft agreement. Owner only."""
    AgreementService.delete_agreement(agreement_id, user.id)
    return success_response({"id": str(agreement_id)}, message="Agreement deleted successfully")


@router.post("/{agreement_id}/send")
async def send_agreement(agreement_id: AgreementId, user: CurrentUser):
    """Send a draft to the renter and open the signing window. Owner only."""
    result = AgreementService.send_agreement(agreement_id, user.id)
    return success_response(result, message="Agreement sent successfully")


@router.post("/{agreement_id}/sign")
async def sign_agreement(
    agreement_id: AgreementId,
    payload: SignatureRequest,
    user: CurrentUser,
    ip_address: ClientIP,
    user_agent: UserAgent,
):
    """
    Sign a sent agreement as owner or renter.

    The client address and user agent are stored with the signature.
    """
    result = AgreementService.sign_agreement(
        agreement_id,
        user.id,
        payload,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    message = (
        "Agreement fully executed; booking confirmed"
        if result.fully_executed
        else "Agreement signed successfully"
    )
    return success_response(result.model_dump(), message=message)
