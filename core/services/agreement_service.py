# =============================================================================
# core/services/agreement_service.py - Rental Agreement Workflow
# =============================================================================
# Implements the agreement lifecycle for a booking:
#
#   create (owner)  -> draft      booking set back to pending
#   send (owner)    -> sent       expires_at = now + AGREEMENT_EXPIRY_DAYS,
#                                 renter gets a notification message
#   sign (each)     -> sent       per-party signature block recorded
#   sign (second)   -> signed     agreed_at set, booking confirmed
#   sign after expiry -> expired
#
# Each step is a read followed by a conditional update. There is no row
# lock, so a double submit can race; contention is assumed to be low.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    AIGenerationError,
    AuthorizationError,
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
)
from core.models.agreement import (
    AgreementCreate,
    AgreementStatus,
    SignatureRecord,
    SignatureRequest,
    SignResult,
)
from core.models.booking import BookingStatus
from core.services.booking_service import BookingService, party_role
from lib import ai_client
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

# Late fee default: share of the daily price
DEFAULT_LATE_FEE_RATE = 0.10

# Booking with everything the agreement text needs
BOOKING_FOR_AGREEMENT = (
    "*, listing:listings(id, title, description, price_per_day, deposit_amount, address, "
    "condition, photos, category:categories(name)), "
    "renter:profiles!bookings_renter_id_fkey(id, full_name, email, phone), "
    "owner:profiles!bookings_owner_id_fkey(id, full_name, email, phone)"
)

AGREEMENT_COLUMNS = (
    "*, booking:bookings(id, owner_id, renter_id, start_date, end_date, total_price, status, "
    "listing:listings(id, title, description, price_per_day, address, condition, category:categories(name)), "
    "renter:profiles!bookings_renter_id_fkey(id, full_name, email), "
    "owner:profiles!bookings_owner_id_fkey(id, full_name, email))"
)

GENERATION_FAILED_MESSAGE = "Failed to generate rental agreement. Please try again."


def late_fee_for(booking: dict[str, Any], requested: float | None) -> float:
    """Requested late fee, or 10% of the listing's daily price."""
    if requested is not None:
        return requested
    listing = booking.get("listing") or {}
    return round(float(listing.get("price_per_day") or 0) * DEFAULT_LATE_FEE_RATE, 2)


class AgreementService:
    """
    Service for rental agreement operations.

    Authorization is checked against the agreement's booking: the owner
    drives the workflow, both parties may read and sign.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def _fetch(agreement_id: str | UUID, columns: str = AGREEMENT_COLUMNS) -> dict[str, Any]:
        agreement = SupabaseClient.fetch_by_id("rental_agreements", agreement_id, columns=columns)
        if not agreement:
            raise NotFoundError("Agreement", normalize_uuid(agreement_id))
        if not agreement.get("booking"):
            # Relation not embedded; load the booking directly
            booking = SupabaseClient.fetch_by_id("bookings", agreement["booking_id"], columns="id, owner_id, renter_id")
            if not booking:
                raise NotFoundError("Booking", str(agreement.get("booking_id")))
            agreement["booking"] = booking
        return agreement

    @staticmethod
    def get_agreement(agreement_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get an agreement with its booking.

        Raises:
            NotFoundError: If agreement doesn't exist
            AuthorizationError: If caller isn't the booking's owner or renter
        """
        agreement = AgreementService._fetch(agreement_id)
        if party_role(agreement["booking"], user_id) is None:
            raise AuthorizationError("Unauthorized to view this agreement")
        return agreement

    @staticmethod
    def list_agreements(
        user_id: str | UUID,
        booking_id: str | UUID | None = None,
    ) -> list[dict[str, Any]]:
        """
        Agreements for bookings the caller takes part in, newest first.

        Raises:
            NotFoundError / AuthorizationError: When booking_id is given and
                the caller isn't on that booking
        """
        client = SupabaseClient.get_client()

        if booking_id:
            BookingService.get_booking(booking_id, user_id, columns="id, owner_id, renter_id")
            booking_ids = [normalize_uuid(booking_id)]
        else:
            uid = normalize_uuid(user_id)
            rows = (
                client.table("bookings")
                .select("id")
                .or_(f"renter_id.eq.{uid},owner_id.eq.{uid}")
                .execute()
            ).data or []
            booking_ids = [str(row["id"]) for row in rows]
            if not booking_ids:
                return []

        response = (
            client.table("rental_agreements")
            .select(AGREEMENT_COLUMNS)
            .in_("booking_id", booking_ids)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    # -------------------------------------------------------------------------
    # Drafting
    # -------------------------------------------------------------------------

    @staticmethod
    def _booking_for_agreement(booking_id: str | UUID) -> dict[str, Any]:
        booking = SupabaseClient.fetch_by_id("bookings", booking_id, columns=BOOKING_FOR_AGREEMENT)
        if not booking:
            raise NotFoundError("Booking", normalize_uuid(booking_id))
        return booking

    @staticmethod
    def generate_preview(user_id: str | UUID, payload: AgreementCreate) -> dict[str, Any]:
        """
        Draft agreement text without saving it.

        Falls back to the plain-text template when the AI model fails, so
        this never raises on provider errors.
        """
        booking = AgreementService._booking_for_agreement(payload.booking_id)
        if party_role(booking, user_id) is None:
            raise AuthorizationError("Unauthorized to access this booking")

        late_fee = late_fee_for(booking, payload.late_fee_per_day)
        delivery = payload.delivery_method.value if payload.delivery_method else None

        try:
            text = ai_client.generate_rental_agreement(booking, custom_terms=payload.custom_terms)
            source = "ai"
        except AIGenerationError as e:
            logger.warning(f"Using template agreement for booking {payload.booking_id}: {e.message}")
            text = ai_client.build_fallback_agreement(
                booking,
                late_fee_per_day=late_fee,
                custom_terms=payload.custom_terms,
                delivery_method=delivery,
            )
            source = "template"

        return {
            "booking_id": str(payload.booking_id),
            "agreement_text": text,
            "source": source,
            "late_fee_per_day": late_fee,
            "delivery_method": delivery or "to-be-arranged",
            "deposit_amount": (booking.get("listing") or {}).get("deposit_amount") or 0,
        }

    @staticmethod
    def create_agreement(user_id: str | UUID, payload: AgreementCreate) -> dict[str, Any]:
        """
        Create a draft agreement for a booking.

        Raises:
            NotFoundError: Booking doesn't exist
            AuthorizationError: Caller isn't the listing owner
            ConflictError: The booking already has an agreement
            AIGenerationError: Agreement text couldn't be generated
        """
        booking = AgreementService._booking_for_agreement(payload.booking_id)
        if party_role(booking, user_id) != "owner":
            raise AuthorizationError("Only the listing owner can create rental agreements")

        existing = SupabaseClient.fetch_first(
            "rental_agreements", {"booking_id": str(payload.booking_id)}, columns="id"
        )
        if existing:
            raise ConflictError(
                "An agreement already exists for this booking",
                details={"agreement_id": existing["id"]},
            )

        try:
            text = ai_client.generate_rental_agreement(booking, custom_terms=payload.custom_terms)
        except AIGenerationError as e:
            logger.error(f"Agreement generation failed for booking {payload.booking_id}: {e.message}")
            raise AIGenerationError(GENERATION_FAILED_MESSAGE)

        now = utc_now_iso()
        agreement = SupabaseClient.insert_row("rental_agreements", {
            "booking_id": str(payload.booking_id),
            "agreement_text": text,
            "custom_terms": payload.custom_terms,
            "status": AgreementStatus.DRAFT.value,
            "created_by": normalize_uuid(user_id),
            "delivery_method": payload.delivery_method.value if payload.delivery_method else "to-be-arranged",
            "late_fee_per_day": late_fee_for(booking, payload.late_fee_per_day),
            "deposit_amount": (booking.get("listing") or {}).get("deposit_amount") or 0,
            "signed_by_owner": False,
            "signed_by_renter": False,
            "created_at": now,
            "updated_at": now,
        })

        BookingService.set_status(payload.booking_id, BookingStatus.PENDING)
        logger.info(f"Created agreement {agreement.get('id')} for booking {payload.booking_id}")
        return agreement

    @staticmethod
    def delete_agreement(agreement_id: str | UUID, user_id: str | UUID) -> None:
        """
        Delete a draft agreement.

        Raises:
            AuthorizationError: Caller isn't the owner
            BadRequestError: Agreement isn't a draft
        """
        agreement = AgreementService._fetch(agreement_id)
        if party_role(agreement["booking"], user_id) != "owner":
            raise AuthorizationError("Only the owner can delete agreements")
        if agreement.get("status") != AgreementStatus.DRAFT.value:
            raise BadRequestError("Only draft agreements can be deleted")

        SupabaseClient.delete_row("rental_agreements", agreement_id)
        logger.info(f"Deleted draft agreement {agreement_id}")

    # -------------------------------------------------------------------------
    # Sending and signing
    # -------------------------------------------------------------------------

    @staticmethod
    def send_agreement(agreement_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Send a draft agreement to the renter for signature.

        Raises:
            AuthorizationError: Caller isn't the owner
            BadRequestError: Agreement isn't a draft
        """
        agreement = AgreementService._fetch(agreement_id)
        booking = agreement["booking"]

        if party_role(booking, user_id) != "owner":
            raise AuthorizationError("Only the owner can send the agreement")
        if agreement.get("status") != AgreementStatus.DRAFT.value:
            raise BadRequestError("Agreement has already been sent or signed")

        now = utc_now()
        expires_at = now + timedelta(days=settings.AGREEMENT_EXPIRY_DAYS)
        SupabaseClient.update_row("rental_agreements", agreement_id, {
            "status": AgreementStatus.SENT.value,
            "sent_at": now.isoformat(),
            "expires_at": expires_at.isoformat(),
            "updated_at": now.isoformat(),
        })

        SupabaseClient.insert_row("messages", {
            "sender_id": normalize_uuid(user_id),
            "recipient_id": str(booking["renter_id"]),
            "booking_id": str(agreement["booking_id"]),
            "content": (
                "A rental agreement has been sent to you for review and signature. "
                f"Please review and sign the agreement within {settings.AGREEMENT_EXPIRY_DAYS} days."
            ),
            "is_ai_response": False,
        })

        logger.info(f"Sent agreement {agreement_id} to renter {booking['renter_id']}")
        renter = booking.get("renter") or {}
        return {
            "id": normalize_uuid(agreement_id),
            "status": AgreementStatus.SENT.value,
            "sent_to": renter.get("email"),
            "expires_at": expires_at.isoformat(),
        }

    @staticmethod
    def sign_agreement(
        agreement_id: str | UUID,
        user_id: str | UUID,
        payload: SignatureRequest,
        ip_address: str = "unknown",
        user_agent: str = "unknown",
    ) -> SignResult:
        """
        Record the caller's signature.

        When both parties have signed, the agreement becomes `signed` and the
        booking is confirmed in the same call.

        Raises:
            AuthorizationError: Caller isn't the owner or renter
            BadRequestError: Caller's role already signed, agreement not
                sent, or the signing window has expired
        """
        agreement = AgreementService._fetch(agreement_id)
        role = party_role(agreement["booking"], user_id)
        if role is None:
            raise AuthorizationError("Unauthorized to sign this agreement")

        if agreement.get(f"signed_by_{role}"):
            raise BadRequestError(f"Agreement already signed by {role}")

        status = agreement.get("status")
        if status != AgreementStatus.SENT.value:
            raise BadRequestError(
                f"Agreement cannot be signed while {status}",
                details={"status": status},
            )

        now = utc_now()
        expires_at = parse_timestamp(agreement.get("expires_at"))
        if expires_at is not None and expires_at < now:
            SupabaseClient.update_row("rental_agreements", agreement_id, {
                "status": AgreementStatus.EXPIRED.value,
                "updated_at": now.isoformat(),
            })
            logger.info(f"Agreement {agreement_id} expired before {role} signed")
            raise BadRequestError("Agreement has expired", details={"expires_at": expires_at.isoformat()})

        signature = SignatureRecord(
            data_url=payload.signature_data,
            timestamp=now.isoformat(),
            ip_address=ip_address,
            user_agent=user_agent,
            agreed_to_terms=payload.agreed_to_terms,
        )
        updated = SupabaseClient.update_row("rental_agreements", agreement_id, {
            f"signed_by_{role}": True,
            f"{role}_signature_data": signature.model_dump(),
            f"{role}_signed_at": now.isoformat(),
            f"agreed_by_{role}": True,
            "updated_at": now.isoformat(),
        })
        if updated is None:
            raise InternalError("Failed to record signature")

        logger.info(f"Agreement {agreement_id} signed by {role}")

        fully_executed = bool(updated.get("signed_by_owner") and updated.get("signed_by_renter"))
        if fully_executed:
            SupabaseClient.update_row("rental_agreements", agreement_id, {
                "status": AgreementStatus.SIGNED.value,
                "agreed_at": now.isoformat(),
            })
            BookingService.set_status(agreement["booking_id"], BookingStatus.CONFIRMED)
            logger.info(f"Agreement {agreement_id} fully executed; booking {agreement['booking_id']} confirmed")

        return SignResult(
            id=normalize_uuid(agreement_id),
            signed=True,
            signed_by=role,
            fully_executed=fully_executed,
        )
