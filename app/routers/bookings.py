# =============================================================================
# app/routers/bookings.py - Booking Endpoints
# =============================================================================
# All endpoints require authentication; callers only ever see bookings
# where they are the renter or the listing owner.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import CurrentUser
from core.models import (
    BookingCreate,
    BookingFilters,
    BookingUpdate,
    Pagination,
    success_response,
)
from core.services import AgreementService, BookingService

router = APIRouter()

BookingId = Annotated[UUID, Path(description="Booking UUID")]


@router.get("")
async def list_bookings(
    filters: Annotated[BookingFilters, Query()],
    user: CurrentUser,
):
    """
    List the caller's bookings.

    role=renter or role=owner narrows to one side; otherwise both.
    """
    bookings, total = BookingService.list_bookings(user.id, filters)
    return success_response(
        bookings,
        pagination=Pagination.from_counts(filters.page, filters.limit, total),
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(payload: BookingCreate, user: CurrentUser):
    """
    Request a booking.

    total_price must equal days x price_per_day; overlapping confirmed or
    active bookings are rejected with 409.
    """
    booking = BookingService.create_booking(user.id, payload)
    return success_response(booking, message="Booking created successfully")


@router.get("/{booking_id}")
async def get_booking(booking_id: BookingId, user: CurrentUser):
    return success_response(BookingService.get_booking(booking_id, user.id))


@router.put("/{booking_id}")
async def update_booking(booking_id: BookingId, payload: BookingUpdate, user: CurrentUser):
    """Change status (subject to the transition table) or, while pending, dates."""
    booking = BookingService.update_booking(booking_id, user.id, payload)
    return success_response(booking, message="Booking updated successfully")


@router.delete("/{booking_id}")
async def cancel_booking(booking_id: BookingId, user: CurrentUser):
    booking = BookingService.cancel_booking(booking_id, user.id)
    return success_response(booking, message="Booking cancelled successfully")


@router.get("/{booking_id}/agreements")
async def booking_agreements(booking_id: BookingId, user: CurrentUser):
    """Rental agreements attached to one of the caller's bookings."""
    return success_response(AgreementService.list_agreements(user.id, booking_id=booking_id))
