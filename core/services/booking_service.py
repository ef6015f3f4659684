# =============================================================================
# core/services/booking_service.py - Booking Business Logic
# =============================================================================
# Handles booking requests, status transitions, date changes and
# cancellation.
#
# Availability is a check-then-write: overlapping confirmed/active
# bookings are looked up, then the row is written. There is no lock
# between the two steps.
# =============================================================================

import logging
from datetime import date
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, page_range, same_id, utc_now_iso
from core.models.booking import (
    BLOCKING_STATUSES,
    OWNER_ONLY_TRANSITIONS,
    BookingCreate,
    BookingFilters,
    BookingStatus,
    BookingUpdate,
    can_transition,
)
from core.models.listing import ListingStatus
from app.exceptions import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

# Price must match days x price_per_day within this tolerance
PRICE_TOLERANCE = 0.01

BOOKING_COLUMNS = (
    "*, listing:listings(id, title, description, price_per_day, photos, address, owner_id, "
    "category:categories(*)), "
    "renter:profiles!bookings_renter_id_fkey(id, full_name, avatar_url, rating, verified), "
    "owner:profiles!bookings_owner_id_fkey(id, full_name, avatar_url, rating, verified)"
)


def party_role(booking: dict[str, Any], user_id: str | UUID) -> str | None:
    """Return "owner", "renter", or None when the user isn't on the booking."""
    if same_id(booking.get("owner_id"), user_id):
        return "owner"
    if same_id(booking.get("renter_id"), user_id):
        return "renter"
    return None


def expected_price(start: date, end: date, price_per_day: float) -> float:
    return round((end - start).days * float(price_per_day), 2)


class BookingService:
    """
    Service for booking operations.

    Every read and write checks that the caller is the renter or the owner.
    """

    @staticmethod
    def has_conflict(
        listing_id: str | UUID,
        start: date,
        end: date,
        exclude_booking_id: str | UUID | None = None,
    ) -> bool:
        """
        True if a confirmed/active booking overlaps [start, end].

        Two ranges overlap when each starts on or before the other ends.
        """
        client = SupabaseClient.get_client()
        query = (
            client.table("bookings")
            .select("id")
            .eq("listing_id", normalize_uuid(listing_id))
            .in_("status", BLOCKING_STATUSES)
            .lte("start_date", end.isoformat())
            .gte("end_date", start.isoformat())
        )
        if exclude_booking_id:
            query = query.neq("id", normalize_uuid(exclude_booking_id))
        return bool(query.execute().data)

    @staticmethod
    def create_booking(renter_id: str | UUID, payload: BookingCreate) -> dict[str, Any]:
        """
        Request a booking.

        Raises:
            NotFoundError: Listing doesn't exist
            BadRequestError: Listing not active, own listing, or wrong price
            ConflictError: Dates overlap a confirmed/active booking
        """
        listing = SupabaseClient.fetch_by_id(
            "listings",
            payload.listing_id,
            columns="id, owner_id, price_per_day, status, title",
        )
        if not listing:
            raise NotFoundError("Listing", str(payload.listing_id))

        if listing.get("status") != ListingStatus.ACTIVE.value:
            raise BadRequestError("Listing is not available for booking")

        if same_id(listing.get("owner_id"), renter_id):
            raise BadRequestError("You cannot book your own listing")

        if BookingService.has_conflict(payload.listing_id, payload.start_date, payload.end_date):
            raise ConflictError("Listing is not available for the selected dates")

        price = expected_price(payload.start_date, payload.end_date, listing["price_per_day"])
        if abs(payload.total_price - price) > PRICE_TOLERANCE:
            raise BadRequestError(
                "Invalid total price calculation",
                details={
                    "expected": price,
                    "provided": payload.total_price,
                    "days": payload.days,
                    "price_per_day": listing["price_per_day"],
                },
            )

        booking = SupabaseClient.insert_row("bookings", {
            "listing_id": str(payload.listing_id),
            "renter_id": normalize_uuid(renter_id),
            "owner_id": str(listing["owner_id"]),
            "start_date": payload.start_date.isoformat(),
            "end_date": payload.end_date.isoformat(),
            "total_price": payload.total_price,
            "status": BookingStatus.PENDING.value,
        })
        logger.info(f"Created booking: {booking.get('id')} listing={payload.listing_id} renter={renter_id}")
        return booking

    @staticmethod
    def get_booking(
        booking_id: str | UUID,
        user_id: str | UUID,
        columns: str = BOOKING_COLUMNS,
    ) -> dict[str, Any]:
        """
        Get a booking the caller takes part in.

        Raises:
            NotFoundError: If booking doesn't exist
            AuthorizationError: If caller is neither renter nor owner
        """
        booking = SupabaseClient.fetch_by_id("bookings", booking_id, columns=columns)
        if not booking:
            raise NotFoundError("Booking", normalize_uuid(booking_id))
        if party_role(booking, user_id) is None:
            raise AuthorizationError("You can only view your own bookings")
        return booking

    @staticmethod
    def list_bookings(
        user_id: str | UUID,
        filters: BookingFilters,
    ) -> tuple[list[dict[str, Any]], int]:
        """Bookings where the caller is renter or owner, newest first by default."""
        uid = normalize_uuid(user_id)
        client = SupabaseClient.get_client()

        query = client.table("bookings").select(BOOKING_COLUMNS, count="exact")
        if filters.role == "renter":
            query = query.eq("renter_id", uid)
        elif filters.role == "owner":
            query = query.eq("owner_id", uid)
        else:
            query = query.or_(f"renter_id.eq.{uid},owner_id.eq.{uid}")

        if filters.status:
            query = query.eq("status", filters.status.value)
        if filters.listing_id:
            query = query.eq("listing_id", str(filters.listing_id))
        if filters.start_date:
            query = query.gte("start_date", filters.start_date.isoformat())
        if filters.end_date:
            query = query.lte("end_date", filters.end_date.isoformat())

        start, end = page_range(filters.page, filters.limit)
        response = (
            query
            .order(filters.sort_by, desc=filters.sort_order == "desc")
            .range(start, end)
            .execute()
        )
        return response.data or [], response.count or 0

    @staticmethod
    def update_booking(
        booking_id: str | UUID,
        user_id: str | UUID,
        payload: BookingUpdate,
    ) -> dict[str, Any]:
        """
        Change a booking's status and/or dates.

        Raises:
            BadRequestError: Invalid transition, or dates changed on a
                non-pending booking
            AuthorizationError: Renter tried an owner-only transition, or the
                owner tried to change dates
            ConflictError: New dates overlap another booking
        """
        booking = SupabaseClient.fetch_by_id("bookings", booking_id)
        if not booking:
            raise NotFoundError("Booking", normalize_uuid(booking_id))

        role = party_role(booking, user_id)
        if role is None:
            raise AuthorizationError("You can only update your own bookings")

        current = BookingStatus(booking.get("status") or BookingStatus.PENDING.value)
        changes: dict[str, Any] = {}

        if payload.status is not None and payload.status != current:
            if not can_transition(current, payload.status):
                raise BadRequestError(
                    f"Invalid status transition from {current.value} to {payload.status.value}"
                )
            if payload.status in OWNER_ONLY_TRANSITIONS and role != "owner":
                verb = "confirm" if payload.status == BookingStatus.CONFIRMED else "mark as active"
                raise AuthorizationError(f"Only the listing owner can {verb} bookings")
            changes["status"] = payload.status.value

        if payload.changes_dates:
            if current != BookingStatus.PENDING:
                raise BadRequestError("Dates can only be changed for pending bookings")
            if role != "renter":
                raise AuthorizationError("Only the renter can change booking dates")

            start = payload.start_date or date.fromisoformat(str(booking["start_date"])[:10])
            end = payload.end_date or date.fromisoformat(str(booking["end_date"])[:10])
            if end <= start:
                raise BadRequestError("End date must be after start date")

            if BookingService.has_conflict(booking["listing_id"], start, end, exclude_booking_id=booking_id):
                raise ConflictError("Listing is not available for the selected dates")

            listing = SupabaseClient.fetch_by_id("listings", booking["listing_id"], columns="price_per_day")
            changes["start_date"] = start.isoformat()
            changes["end_date"] = end.isoformat()
            if listing:
                changes["total_price"] = expected_price(start, end, listing["price_per_day"])

        if not changes:
            return booking

        changes["updated_at"] = utc_now_iso()
        updated = SupabaseClient.update_row("bookings", booking_id, changes)
        logger.info(f"Updated booking: {booking_id} by {role} fields={sorted(changes)}")
        return updated or {**booking, **changes}

    @staticmethod
    def cancel_booking(booking_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Cancel a booking (either party).

        Raises:
            BadRequestError: If booking is completed or already cancelled
        """
        booking = SupabaseClient.fetch_by_id("bookings", booking_id)
        if not booking:
            raise NotFoundError("Booking", normalize_uuid(booking_id))
        if party_role(booking, user_id) is None:
            raise AuthorizationError("You can only cancel your own bookings")

        status = booking.get("status")
        if status == BookingStatus.COMPLETED.value:
            raise BadRequestError("Completed bookings cannot be cancelled")
        if status == BookingStatus.CANCELLED.value:
            raise BadRequestError("Booking is already cancelled")

        updated = SupabaseClient.update_row(
            "bookings",
            booking_id,
            {"status": BookingStatus.CANCELLED.value, "updated_at": utc_now_iso()},
        )
        logger.info(f"Cancelled booking: {booking_id} by user {user_id}")
        return updated or {**booking, "status": BookingStatus.CANCELLED.value}

    @staticmethod
    def set_status(booking_id: str | UUID, status: BookingStatus) -> dict[str, Any] | None:
        """
        Write a status without transition checks.

        Used by the agreement workflow, which owns its own rules.
        """
        updated = SupabaseClient.update_row(
            "bookings",
            booking_id,
            {"status": status.value, "updated_at": utc_now_iso()},
        )
        logger.info(f"Booking {booking_id} status set to {status.value}")
        return updated
