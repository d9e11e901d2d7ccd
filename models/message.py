"""
Conversation message model.
"""

import enum

from sqlalchemy import JSON, Column, Enum, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class MessageRole(str, enum.Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """
    One entry in a conversation, ordered by ``created_at``.

    ``meta`` is stored in the ``metadata`` column; the attribute name differs
    because declarative models reserve ``metadata``.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_id_created_at", "conversation_id", "created_at"),
    )

    conversation_id = Column(
        UUID(), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    role = Column(
        Enum(MessageRole, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    text = Column(Text, nullable=False)

    # Reserved for semantic search, not read by any operation yet
    embedding = Column(JSON, nullable=True)
    meta = Column("metadata", JSON, nullable=False, default=dict)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
