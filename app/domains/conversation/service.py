"""Conversation bookkeeping: ownership checks, listing, history and deletion."""

import logging
from uuid import UUID

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.exceptions.conversation import ConversationNotFoundError
from app.schemas.conversation import ConversationListResponse, ConversationResponse
from models.base import utc_now
from models.conversation import DEFAULT_CONVERSATION_TITLE, Conversation
from models.message import Message

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
TITLE_LENGTH = 50


class ConversationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_conversation(self, user_id: UUID) -> Conversation:
        conversation = Conversation(user_id=user_id, title=DEFAULT_CONVERSATION_TITLE, preview="")
        self.db.add(conversation)
        await self.db.commit()
        await self.db.refresh(conversation)
        logger.info(f"Created conversation {conversation.id} for user {user_id}")
        return conversation

    async def get_owned_conversation(self, conversation_id: UUID, user_id: UUID) -> Conversation:
        """Load a conversation, failing the same way whether it is missing or not the caller's."""
        query = select(Conversation).where(
            Conversation.id == conversation_id, Conversation.user_id == user_id
        )
        result = await self.db.execute(query)
        conversation = result.scalar_one_or_none()

        if not conversation:
            raise ConversationNotFoundError()

        return conversation

    async def list_conversations(
        self, user_id: UUID, page: int = 1, size: int = 50
    ) -> ConversationListResponse:
        """Get one page of a user's conversations, most recently updated first."""
        offset = (page - 1) * size

        count_query = select(func.count(Conversation.id)).where(Conversation.user_id == user_id)
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
            .limit(size)
            .offset(offset)
        )
        conversations = (await self.db.execute(query)).scalars().all()

        return ConversationListResponse(
            conversations=[ConversationResponse.model_validate(conv) for conv in conversations],
            total=total,
            page=page,
            size=size,
            has_next=offset + size < total,
            has_prev=page > 1,
        )

    async def list_messages(self, conversation_id: UUID, user_id: UUID) -> list[Message]:
        await self.get_owned_conversation(conversation_id, user_id)
        return await self.get_messages(conversation_id)

    async def get_messages(self, conversation_id: UUID) -> list[Message]:
        """All messages of a conversation, oldest first."""
        query = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
        )
        return list((await self.db.execute(query)).scalars().all())

    async def get_recent_messages(
        self, conversation_id: UUID, limit: int, exclude_id: UUID | None = None
    ) -> list[Message]:
        """The newest ``limit`` messages, returned oldest first."""
        query = select(Message).where(Message.conversation_id == conversation_id)
        if exclude_id is not None:
            query = query.where(Message.id != exclude_id)
        query = query.order_by(Message.created_at.desc()).limit(limit)

        messages = list((await self.db.execute(query)).scalars().all())
        messages.reverse()
        return messages

    def record_user_message(self, conversation: Conversation, text: str) -> None:
        """Refresh preview, title and timestamp after a user message.

        The title is only taken from the message while it still has its
        default value.
        """
        conversation.preview = text[:PREVIEW_LENGTH]
        if conversation.has_default_title:
            conversation.title = text[:TITLE_LENGTH]
        conversation.updated_at = utc_now()

    async def delete_conversation(self, conversation_id: UUID, user_id: UUID) -> None:
        """Delete a conversation and every message in it."""
        conversation = await self.get_owned_conversation(conversation_id, user_id)

        try:
            await self.db.execute(delete(Message).where(Message.conversation_id == conversation.id))
            await self.db.delete(conversation)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Deleted conversation {conversation_id}")
