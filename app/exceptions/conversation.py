"""Conversation-related exceptions."""

from .base import NotFoundError


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation is absent or belongs to someone else."""

    def __init__(self, message: str = "Conversation not found"):
        super().__init__(message=message, error_code="CONVERSATION_NOT_FOUND")
