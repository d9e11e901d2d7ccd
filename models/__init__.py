"""
Models package initialization.
"""

from .base import Base, BaseModel
from .conversation import DEFAULT_CONVERSATION_TITLE, Conversation, ConversationStatus
from .message import Message, MessageRole
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Conversation",
    "ConversationStatus",
    "DEFAULT_CONVERSATION_TITLE",
    "Message",
    "MessageRole",
]
