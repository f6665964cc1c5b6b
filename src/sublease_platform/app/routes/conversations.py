"""Messaging routes: inbox, get-or-create conversation, messages, read receipts."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.app.routes.auth import get_current_user_id
from sublease_platform.domain.schemas import (
    ConversationCreate,
    ConversationResponse,
    ConversationSummaryResponse,
    ListingResponse,
    MarkReadResponse,
    MessageCreate,
    MessageResponse,
    MessageWithSender,
    UserResponse,
)
from sublease_platform.infra.database import get_db
from sublease_platform.services.conversation_service import (
    ConversationService,
    ConversationSummary,
)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])
messages_router = APIRouter(prefix="/api/messages", tags=["conversations"])


def _summary_response(summary: ConversationSummary) -> ConversationSummaryResponse:
    conversation = summary.conversation
    return ConversationSummaryResponse(
        id=conversation.id,
        user1_id=conversation.user1_id,
        user2_id=conversation.user2_id,
        listing_id=conversation.listing_id,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        other_user=UserResponse.model_validate(summary.other_user),
        listing=ListingResponse.model_validate(summary.listing) if summary.listing else None,
        last_message=(
            MessageResponse.model_validate(summary.last_message)
            if summary.last_message else None
        ),
        unread_count=summary.unread_count,
    )


@router.get("", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Caller's inbox, most recently active first."""
    summaries = await ConversationService(db).list_conversations_for_user(caller_id)
    return [_summary_response(s) for s in summaries]


@router.post("", response_model=ConversationResponse)
async def start_conversation(
    data: ConversationCreate,
    response: Response,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get-or-create. 201 when a new conversation was created, 200 otherwise."""
    conversation, created = await ConversationService(db).get_or_create_conversation(
        caller_id, data.other_user_id, data.listing_id,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return conversation


@router.get("/{conversation_id}/messages", response_model=list[MessageWithSender])
async def list_messages(
    conversation_id: int,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await ConversationService(db).list_messages(conversation_id, caller_id)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    conversation_id: int,
    data: MessageCreate,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await ConversationService(db).post_message(conversation_id, caller_id, data.content)


@router.patch("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_conversation_read(
    conversation_id: int,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    updated = await ConversationService(db).mark_conversation_read(conversation_id, caller_id)
    return MarkReadResponse(updated=updated)


@messages_router.patch("/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: int,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await ConversationService(db).mark_read(message_id, caller_id)
