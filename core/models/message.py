# =============================================================================
# core/models/message.py - Direct Message Schemas
# =============================================================================
# Messages are one-to-one between users, optionally tied to a booking.
# Conversations are not stored; they are derived by grouping messages on
# the other participant.
# =============================================================================

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    """
    Schema for sending a message.

    Example:
        {
            "recipient_id": "6fa459ea-ee8a-3ca4-894e-db77e160355e",
            "content": "Is the tent still available next weekend?"
        }
    """

    recipient_id: UUID
    content: str = Field(..., min_length=1, max_length=5000)
    booking_id: UUID | None = None


class MessageFilters(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=100)
    conversation_with: UUID | None = Field(
        default=None,
        description="Return the thread with this user instead of the conversation list",
    )
    booking_id: UUID | None = None
    sort_order: Literal["asc", "desc"] = "desc"


class ConversationSummary(BaseModel):
    """One entry in the conversation list."""

    other_user_id: str
    other_user: dict | None = None
    last_message: dict
    message_count: int = Field(default=0, ge=0)
