"""Support service: hands a conversation off to a human agent."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.chat.advisor import ConversationAdvisor
from app.domains.conversation.service import ConversationService
from app.schemas.support import EscalationResponse
from app.services.email_service import EmailService
from app.services.llm_gateway import LLMGateway
from models.base import utc_now
from models.conversation import ConversationStatus

logger = logging.getLogger(__name__)


class SupportService:
    def __init__(self, db: AsyncSession, gateway: LLMGateway, notifier: EmailService):
        self.db = db
        self.conversations = ConversationService(db)
        self.advisor = ConversationAdvisor(gateway)
        self.notifier = notifier

    async def escalate(
        self,
        conversation_id: UUID,
        user_id: UUID,
        contact_email: str,
        notes: str | None = None,
    ) -> EscalationResponse:
        """Escalate a conversation and notify the support team and the customer.

        The status change is committed before any email is sent. Notification
        failures are reported in the response and never undo the escalation.

        Args:
            conversation_id: Conversation to escalate
            user_id: Acting user, who must own the conversation
            contact_email: Address the customer wants to be reached at
            notes: Optional context for the agent

        Returns:
            EscalationResponse carrying the summary and both delivery results
        """
        conversation = await self.conversations.get_owned_conversation(conversation_id, user_id)

        messages = await self.conversations.get_messages(conversation.id)
        summary = await self.advisor.summarize(messages)

        conversation.status = ConversationStatus.ESCALATED
        conversation.escalation_notes = notes or ""
        conversation.updated_at = utc_now()
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Conversation {conversation.id} escalated by user {user_id}")

        alert = await self.notifier.send_escalation_alert(contact_email, summary, notes)
        copy = await self.notifier.send_summary_copy(contact_email, summary)

        for result in (alert, copy):
            if not result.success:
                logger.error(
                    f"Escalation {conversation.id}: {result.kind} to {result.recipient} failed: {result.error}"
                )

        return EscalationResponse(
            escalation_id=conversation.id,
            status=conversation.status,
            summary=summary,
            notifications=[alert, copy],
        )
