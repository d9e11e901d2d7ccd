"""Support escalation and notification schemas."""

from uuid import UUID

from pydantic import EmailStr, Field

from models.conversation import ConversationStatus

from .base import BaseSchema


class NotificationResult(BaseSchema):
    """Outcome of one outbound email."""

    kind: str
    recipient: str | None
    success: bool
    error: str | None = None


class EscalationRequest(BaseSchema):
    conversation_id: UUID
    email: EmailStr = Field(..., description="Where the customer wants to be contacted")
    notes: str | None = Field(None, max_length=5000, description="Extra context for the agent")


class EscalationResponse(BaseSchema):
    escalation_id: UUID
    status: ConversationStatus
    summary: str
    notifications: list[NotificationResult]
    message: str = "Your request has been escalated. You will receive an email shortly."
