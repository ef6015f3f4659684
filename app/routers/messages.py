# =============================================================================
# app/routers/messages.py - Messaging Endpoints
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import CurrentUser
from core.models import MessageCreate, MessageFilters, Pagination, success_response
from core.services import MessageService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(payload: MessageCreate, user: CurrentUser):
    message = MessageService.send_message(user.id, payload)
    return success_response(message, message="Message sent successfully")


@router.get("")
async def list_messages(
    filters: Annotated[MessageFilters, Query()],
    user: CurrentUser,
):
    """
    Conversation list, or one thread when conversation_with is given.

    Threads are paginated; the conversation list is not.
    """
    if filters.conversation_with is None:
        return success_response(MessageService.list_conversations(user.id))

    messages, total = MessageService.get_thread(
        user.id,
        filters.conversation_with,
        page=filters.page,
        limit=filters.limit,
        sort_order=filters.sort_order,
        booking_id=filters.booking_id,
    )
    return success_response(
        messages,
        pagination=Pagination.from_counts(filters.page, filters.limit, total),
    )


@router.get("/conversations/{user_id}")
async def get_conversation(
    user_id: Annotated[UUID, Path(description="The other participant")],
    user: CurrentUser,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
):
    conversation, total = MessageService.get_conversation(user.id, user_id, page=page, limit=limit)
    return success_response(conversation, pagination=Pagination.from_counts(page, limit, total))
