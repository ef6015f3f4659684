# =============================================================================
# core/services/message_service.py - Direct Messaging
# =============================================================================
# One-to-one messages between users. A conversation is every message
# between the caller and one other user; the conversation list is built
# by grouping the caller's messages on the other participant.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, page_range, same_id
from core.models.message import ConversationSummary, MessageCreate
from core.models.profile import PUBLIC_PROFILE_COLUMNS
from core.services.booking_service import party_role
from app.exceptions import (
    AuthorizationError,
    BadRequestError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

MESSAGE_COLUMNS = (
    "*, sender:profiles!messages_sender_id_fkey(id, full_name, avatar_url), "
    "recipient:profiles!messages_recipient_id_fkey(id, full_name, avatar_url)"
)


def _thread_filter(user_id: str, other_id: str) -> str:
    return (
        f"and(sender_id.eq.{user_id},recipient_id.eq.{other_id}),"
        f"and(sender_id.eq.{other_id},recipient_id.eq.{user_id})"
    )


class MessageService:
    """Service for messaging operations."""

    @staticmethod
    def send_message(sender_id: str | UUID, payload: MessageCreate) -> dict[str, Any]:
        """
        Send a message.

        Raises:
            BadRequestError: Messaging yourself, or recipient isn't the other
                party of the linked booking
            NotFoundError: Recipient or booking doesn't exist
            AuthorizationError: Caller isn't on the linked booking
        """
        if same_id(sender_id, payload.recipient_id):
            raise BadRequestError("Cannot send message to yourself")

        recipient = SupabaseClient.fetch_by_id("profiles", payload.recipient_id, columns="id, full_name")
        if not recipient:
            raise NotFoundError("Recipient", str(payload.recipient_id))

        if payload.booking_id:
            booking = SupabaseClient.fetch_by_id(
                "bookings", payload.booking_id, columns="id, renter_id, owner_id"
            )
            if not booking:
                raise NotFoundError("Booking", str(payload.booking_id))

            role = party_role(booking, sender_id)
            if role is None:
                raise AuthorizationError("You can only send messages for your own bookings")

            other_party = booking["owner_id"] if role == "renter" else booking["renter_id"]
            if not same_id(payload.recipient_id, other_party):
                raise BadRequestError("Invalid recipient for this booking")

        message = SupabaseClient.insert_row("messages", {
            "sender_id": normalize_uuid(sender_id),
            "recipient_id": str(payload.recipient_id),
            "booking_id": str(payload.booking_id) if payload.booking_id else None,
            "content": payload.content,
            "is_ai_response": False,
        })
        logger.info(f"Message {message.get('id')} sent from {sender_id} to {payload.recipient_id}")
        return message

    @staticmethod
    def get_thread(
        user_id: str | UUID,
        other_user_id: str | UUID,
        page: int = 1,
        limit: int = 50,
        sort_order: str = "desc",
        booking_id: str | UUID | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Messages exchanged between the caller and one other user."""
        client = SupabaseClient.get_client()
        query = (
            client.table("messages")
            .select(MESSAGE_COLUMNS, count="exact")
            .or_(_thread_filter(normalize_uuid(user_id), normalize_uuid(other_user_id)))
        )
        if booking_id:
            query = query.eq("booking_id", normalize_uuid(booking_id))

        start, end = page_range(page, limit)
        response = query.order("created_at", desc=sort_order == "desc").range(start, end).execute()
        return response.data or [], response.count or 0

    @staticmethod
    def list_conversations(user_id: str | UUID) -> list[dict[str, Any]]:
        """
        One entry per person the caller has exchanged messages with.

        Ordered by most recent message first.
        """
        uid = normalize_uuid(user_id)
        client = SupabaseClient.get_client()
        messages = (
            client.table("messages")
            .select(MESSAGE_COLUMNS)
            .or_(f"sender_id.eq.{uid},recipient_id.eq.{uid}")
            .order("created_at", desc=True)
            .execute()
        ).data or []

        conversations: dict[str, ConversationSummary] = {}
        for message in messages:
            outgoing = same_id(message.get("sender_id"), uid)
            other_id = str(message["recipient_id"] if outgoing else message["sender_id"])

            if other_id not in conversations:
                conversations[other_id] = ConversationSummary(
                    other_user_id=other_id,
                    other_user=message.get("recipient" if outgoing else "sender"),
                    last_message=message,
                )
            conversations[other_id].message_count += 1

        return [c.model_dump() for c in conversations.values()]

    @staticmethod
    def get_conversation(
        user_id: str | UUID,
        other_user_id: str | UUID,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[dict[str, Any], int]:
        """
        Conversation metadata plus one page of messages.

        Raises:
            NotFoundError: If the other user doesn't exist
        """
        other = SupabaseClient.fetch_by_id("profiles", other_user_id, columns=PUBLIC_PROFILE_COLUMNS)
        if not other:
            raise NotFoundError("User", normalize_uuid(other_user_id))

        messages, total = MessageService.get_thread(user_id, other_user_id, page=page, limit=limit)

        uid, oid = normalize_uuid(user_id), normalize_uuid(other_user_id)
        low, high = sorted([uid, oid])
        return {
            "conversation": {
                "id": f"{low}-{high}",
                "other_user": other,
                "total_messages": total,
            },
            "messages": messages,
        }, total
