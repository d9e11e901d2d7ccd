"""Chat schemas for request/response serialization."""

from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseSchema
from .conversation import MessageResponse


class ChatRequest(BaseSchema):
    """Schema for sending a message to the assistant."""

    conversation_id: UUID = Field(..., description="Conversation to post into")
    message: str = Field(..., min_length=1, max_length=10000, description="User message")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class ReplyResult(BaseSchema):
    """Outcome of asking the model for a reply."""

    text: str
    success: bool
    error: str | None = None


class ChatResponse(BaseSchema):
    """Schema for the result of one turn."""

    conversation_id: UUID
    user_message: MessageResponse
    assistant_message: MessageResponse
    generation_succeeded: bool = Field(
        ..., description="False when the reply is the fallback apology"
    )
    suggest_escalation: bool
