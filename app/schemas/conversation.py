"""Conversation schemas for request/response serialization."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field

from models.conversation import ConversationStatus
from models.message import MessageRole

from .base import BaseModelSchema, BaseSchema


class ConversationCreateResponse(BaseSchema):
    conversation_id: UUID
    timestamp: datetime


class ConversationResponse(BaseModelSchema):
    """Schema for a conversation in a listing."""

    title: str
    preview: str
    status: ConversationStatus
    escalated: bool


class ConversationListResponse(BaseSchema):
    """Schema for a page of conversations."""

    conversations: list[ConversationResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


class MessageResponse(BaseModelSchema):
    """Schema for a stored message."""

    conversation_id: UUID
    role: MessageRole
    text: str
    metadata: dict = Field(default_factory=dict, validation_alias=AliasChoices("meta", "metadata"))
