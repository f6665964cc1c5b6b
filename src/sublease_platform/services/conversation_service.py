"""Conversation and messaging engine.

A conversation is identified by the canonical pair ``(min(a, b), max(a, b))``
plus the optional listing id. Message posting and the conversation's
``updated_at`` bump are committed together so inbox recency always reflects
the latest persisted message.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from sublease_platform.domain.errors import (
    EmptyContent,
    NotAParticipant,
    NotFound,
    SelfConversation,
)
from sublease_platform.domain.models import Conversation, Listing, Message, User, utcnow
from sublease_platform.infra.database import insert_ignoring_conflicts

logger = logging.getLogger(__name__)


def canonical_pair(user_a: int, user_b: int) -> tuple[int, int]:
    """Order-independent key for a pair of users."""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


@dataclass
class ConversationSummary:
    """Inbox row for one conversation, from the viewpoint of one user."""

    conversation: Conversation
    other_user: User
    listing: Optional[Listing]
    last_message: Optional[Message]
    unread_count: int = 0


class ConversationService:
    """Pairwise conversations and their messages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    async def _find(
        self, user1_id: int, user2_id: int, listing_id: Optional[int],
    ) -> Optional[Conversation]:
        listing_clause = (
            Conversation.listing_id.is_(None)
            if listing_id is None
            else Conversation.listing_id == listing_id
        )
        result = await self.db.execute(
            select(Conversation).where(
                Conversation.user1_id == user1_id,
                Conversation.user2_id == user2_id,
                listing_clause,
            )
        )
        return result.scalar_one_or_none()

    async def get_or_create_conversation(
        self,
        caller_id: int,
        counterpart_id: int,
        listing_id: Optional[int] = None,
    ) -> tuple[Conversation, bool]:
        """Return the canonical conversation for the pair (and listing), creating it if needed.

        Returns:
            Tuple of (Conversation, created).

        Raises:
            SelfConversation: caller and counterpart are the same user.
            NotFound: counterpart or listing does not exist.
        """
        if caller_id == counterpart_id:
            raise SelfConversation()
        if await self.db.get(User, counterpart_id) is None:
            raise NotFound("User not found")
        if listing_id is not None and await self.db.get(Listing, listing_id) is None:
            raise NotFound("Listing not found")

        user1_id, user2_id = canonical_pair(caller_id, counterpart_id)

        existing = await self._find(user1_id, user2_id, listing_id)
        if existing:
            logger.debug(
                "Found conversation %s for pair (%s, %s) listing %s",
                existing.id, user1_id, user2_id, listing_id,
            )
            return existing, False

        # A concurrent request may insert the same row between the lookup and
        # here; the unique indexes turn that into a no-op and we re-read.
        now = utcnow()
        result = await self.db.execute(
            insert_ignoring_conflicts(
                self.db,
                Conversation,
                user1_id=user1_id,
                user2_id=user2_id,
                listing_id=listing_id,
                created_at=now,
                updated_at=now,
            )
        )
        created = result.rowcount == 1
        await self.db.commit()

        conversation = await self._find(user1_id, user2_id, listing_id)
        if created:
            logger.info(
                "Created conversation %s for pair (%s, %s) listing %s",
                conversation.id, user1_id, user2_id, listing_id,
            )
        return conversation, created

    async def get_conversation(self, conversation_id: int) -> Conversation:
        conversation = await self.db.get(Conversation, conversation_id)
        if conversation is None:
            raise NotFound("Conversation not found")
        return conversation

    async def _get_for_participant(self, conversation_id: int, user_id: int) -> Conversation:
        conversation = await self.get_conversation(conversation_id)
        if not conversation.has_participant(user_id):
            raise NotAParticipant()
        return conversation

    async def list_conversations_for_user(self, user_id: int) -> list[ConversationSummary]:
        """Every conversation the user is part of, most recently active first."""
        result = await self.db.execute(
            select(Conversation)
            .options(
                selectinload(Conversation.user1),
                selectinload(Conversation.user2),
                selectinload(Conversation.listing),
            )
            .where(or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id))
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        )
        conversations = list(result.scalars().all())
        if not conversations:
            return []

        ids = [c.id for c in conversations]
        latest = await self._latest_messages(ids)
        unread = await self._unread_counts(ids, user_id)

        summaries = []
        for conversation in conversations:
            summaries.append(
                ConversationSummary(
                    conversation=conversation,
                    other_user=conversation.other_participant(user_id),
                    listing=conversation.listing,
                    last_message=latest.get(conversation.id),
                    unread_count=unread.get(conversation.id, 0),
                )
            )
        return summaries

    async def _latest_messages(self, conversation_ids: list[int]) -> dict[int, Message]:
        ranked = (
            select(
                Message,
                func.row_number()
                .over(
                    partition_by=Message.conversation_id,
                    order_by=(Message.created_at.desc(), Message.id.desc()),
                )
                .label("row_rank"),
            )
            .where(Message.conversation_id.in_(conversation_ids))
            .subquery()
        )
        latest = aliased(Message, ranked)
        result = await self.db.execute(select(latest).where(ranked.c.row_rank == 1))
        return {m.conversation_id: m for m in result.scalars().all()}

    async def _unread_counts(self, conversation_ids: list[int], user_id: int) -> dict[int, int]:
        result = await self.db.execute(
            select(Message.conversation_id, func.count(Message.id))
            .where(
                Message.conversation_id.in_(conversation_ids),
                Message.sender_id != user_id,
                Message.read_at.is_(None),
            )
            .group_by(Message.conversation_id)
        )
        return {conversation_id: count for conversation_id, count in result.all()}

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def post_message(self, conversation_id: int, sender_id: int, content: str) -> Message:
        """Persist a message and bump the conversation's recency in one commit.

        Raises:
            EmptyContent: content is blank after trimming.
            NotFound: conversation does not exist.
            NotAParticipant: sender is not one of the two users.
        """
        content = (content or "").strip()
        if not content:
            raise EmptyContent()

        conversation = await self._get_for_participant(conversation_id, sender_id)

        now = utcnow()
        message = Message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            content=content,
            created_at=now,
        )
        self.db.add(message)
        conversation.updated_at = now
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(message)

        logger.debug(
            "Stored message %s in conversation %s from user %s",
            message.id, conversation.id, sender_id,
        )
        return message

    async def list_messages(self, conversation_id: int, caller_id: int) -> list[Message]:
        """Messages oldest first, each with its sender loaded."""
        await self._get_for_participant(conversation_id, caller_id)

        result = await self.db.execute(
            select(Message)
            .options(selectinload(Message.sender))
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return list(result.scalars().all())

    async def mark_read(self, message_id: int, caller_id: int) -> Message:
        """Recipient marks a message read. Sender calls and repeat calls are no-ops."""
        message = await self.db.get(Message, message_id)
        if message is None:
            raise NotFound("Message not found")
        await self._get_for_participant(message.conversation_id, caller_id)

        if message.sender_id != caller_id and message.read_at is None:
            message.read_at = utcnow()
            await self.db.commit()
            await self.db.refresh(message)
            logger.debug("Message %s read by user %s", message_id, caller_id)
        return message

    async def mark_conversation_read(self, conversation_id: int, caller_id: int) -> int:
        """Mark every unread message from the other party read. Returns the count."""
        await self._get_for_participant(conversation_id, caller_id)

        result = await self.db.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender_id != caller_id,
                Message.read_at.is_(None),
            )
            .values(read_at=utcnow())
        )
        await self.db.commit()
        return result.rowcount
