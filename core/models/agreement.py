# =============================================================================
# core/models/agreement.py - Rental Agreement Schemas
# =============================================================================
# A rental agreement is a per-booking document that both parties sign.
#
# Status flow (forward only):
#   draft -> sent -> signed
#   sent -> expired (signing window passed)
#
# Signatures are stored as JSON on the agreement row, one block per party.
# =============================================================================

from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field


class AgreementStatus(str, Enum):
    """States of a rental agreement."""
    DRAFT = "draft"
    SENT = "sent"
    SIGNED = "signed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class DeliveryMethod(str, Enum):
    SELF_PICKUP = "self-pickup"
    HOME_DELIVERY = "home-delivery"
    MEET_HALFWAY = "meet-halfway"


PartyRole = Literal["owner", "renter"]


class AgreementCreate(BaseModel):
    """
    Schema for drafting an agreement for a booking.

    Accepts both snake_case and the camelCase keys older web clients send.

    Example:
        {
            "booking_id": "550e8400-e29b-41d4-a716-446655440000",
            "custom_terms": "Return with a full battery.",
            "delivery_method": "self-pickup"
        }
    """

    booking_id: UUID = Field(..., validation_alias=AliasChoices("booking_id", "bookingId"))
    custom_terms: str | None = Field(
        default=None,
        max_length=5000,
        validation_alias=AliasChoices("custom_terms", "customTerms"),
    )
    delivery_method: DeliveryMethod | None = Field(
        default=None,
        validation_alias=AliasChoices("delivery_method", "deliveryMethod"),
    )
    late_fee_per_day: float | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("late_fee_per_day", "lateFeePerDay"),
        description="Defaults to 10% of the daily price",
    )


class SignatureRequest(BaseModel):
    """
    Body of POST /agreements/{id}/sign.

    `signature_data` is the drawn signature as a data URL.
    """

    signature_data: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("signature_data", "signatureData"),
    )
    agreed_to_terms: bool = Field(
        default=True,
        validation_alias=AliasChoices("agreed_to_terms", "agreedToTerms"),
    )


class SignatureRecord(BaseModel):
    """Audit block stored in owner_signature_data / renter_signature_data."""

    data_url: str
    timestamp: str
    ip_address: str
    user_agent: str
    agreed_to_terms: bool


class SignResult(BaseModel):
    id: str
    signed: bool = True
    signed_by: PartyRole
    fully_executed: bool
