# =============================================================================
# core/models/booking.py - Booking Schemas
# =============================================================================
# A booking reserves one listing for a date range.
#
# Status flow:
#   pending -> confirmed -> active -> completed
#   (any non-terminal state) -> cancelled
# =============================================================================

from datetime import date
from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class BookingStatus(str, Enum):
    """
    Lifecycle of a booking.

    - pending: requested by the renter, awaiting owner/agreement
    - confirmed: accepted (or agreement fully signed)
    - active: item handed over
    - completed: item returned (reviews become possible)
    - cancelled: terminal
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that block other bookings for the same dates
BLOCKING_STATUSES = [BookingStatus.CONFIRMED.value, BookingStatus.ACTIVE.value]

ALLOWED_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.ACTIVE, BookingStatus.CANCELLED},
    BookingStatus.ACTIVE: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# Transitions only the listing owner may make
OWNER_ONLY_TRANSITIONS = {BookingStatus.CONFIRMED, BookingStatus.ACTIVE}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def _check_range(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and end <= start:
        raise ValueError("End date must be after start date")


class BookingCreate(BaseModel):
    """
    Schema for requesting a booking.

    `total_price` is sent by the client and checked against
    days x price_per_day on the server.

    Example:
        {
            "listing_id": "550e8400-e29b-41d4-a716-446655440000",
            "start_date": "2024-06-01",
            "end_date": "2024-06-04",
            "total_price": 135.0
        }
    """

    listing_id: UUID
    start_date: date
    end_date: date
    total_price: float = Field(..., ge=0.01)

    @model_validator(mode="after")
    def end_after_start(self) -> "BookingCreate":
        _check_range(self.start_date, self.end_date)
        return self

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days


class BookingUpdate(BaseModel):
    """Status change and/or new dates for an existing booking."""

    status: BookingStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    total_price: float | None = Field(default=None, ge=0.01)

    @model_validator(mode="after")
    def end_after_start(self) -> "BookingUpdate":
        _check_range(self.start_date, self.end_date)
        return self

    @property
    def changes_dates(self) -> bool:
        return self.start_date is not None or self.end_date is not None


class BookingFilters(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    status: BookingStatus | None = None
    listing_id: UUID | None = None
    role: Literal["renter", "owner"] | None = None
    start_date: date | None = None
    end_date: date | None = None
    sort_by: Literal["created_at", "start_date", "end_date", "total_price"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
