"""Chat service: drives one customer turn through the support assistant."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.chat.advisor import ESCALATION_WINDOW, HISTORY_WINDOW, ConversationAdvisor
from app.domains.conversation.service import ConversationService
from app.schemas.chat import ChatResponse
from app.schemas.conversation import MessageResponse
from app.services.llm_gateway import LLMGateway
from models.message import Message, MessageRole

logger = logging.getLogger(__name__)


class ChatService:
    """Service class for support chat turns.

    The gateway is shared by the whole process and handed in by the caller;
    the database session belongs to the current request.
    """

    def __init__(self, db: AsyncSession, gateway: LLMGateway):
        """Initialize chat service.

        Args:
            db: Async database session for data operations.
            gateway: Language model gateway used for replies and advice.
        """
        self.db = db
        self.conversations = ConversationService(db)
        self.advisor = ConversationAdvisor(gateway)

    async def send_message(self, conversation_id: UUID, user_id: UUID, text: str) -> ChatResponse:
        """Store a customer message, answer it and check whether to escalate.

        The customer's message is committed before the model is called, so it
        survives a failed or interrupted generation. A gateway failure yields
        the fallback apology with ``generation_succeeded=False``.

        Args:
            conversation_id: Conversation to post into
            user_id: Acting user, who must own the conversation
            text: The customer's message

        Returns:
            ChatResponse with both stored messages and the escalation advice
        """
        conversation = await self.conversations.get_owned_conversation(conversation_id, user_id)

        user_message = Message(conversation_id=conversation.id, role=MessageRole.USER, text=text)
        self.db.add(user_message)
        await self.db.commit()
        await self.db.refresh(user_message)

        history = await self.conversations.get_recent_messages(
            conversation.id, limit=HISTORY_WINDOW, exclude_id=user_message.id
        )
        reply = await self.advisor.generate_reply(history, text)

        assistant_message = Message(
            conversation_id=conversation.id,
            role=MessageRole.ASSISTANT,
            text=reply.text,
            meta={} if reply.success else {"fallback": True},
        )
        self.db.add(assistant_message)
        self.conversations.record_user_message(conversation, text)

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(assistant_message)

        recent = await self.conversations.get_recent_messages(
            conversation.id, limit=ESCALATION_WINDOW
        )
        suggest_escalation = await self.advisor.should_escalate(recent)
        if suggest_escalation:
            logger.info(f"Escalation suggested for conversation {conversation.id}")

        return ChatResponse(
            conversation_id=conversation.id,
            user_message=MessageResponse.model_validate(user_message),
            assistant_message=MessageResponse.model_validate(assistant_message),
            generation_succeeded=reply.success,
            suggest_escalation=suggest_escalation,
        )
