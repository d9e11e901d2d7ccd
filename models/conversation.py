"""
Support conversation model.
"""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel

DEFAULT_CONVERSATION_TITLE = "New Conversation"


class ConversationStatus(str, enum.Enum):
    """Lifecycle status of a conversation."""

    ACTIVE = "active"
    RESOLVED = "resolved"
    ESCALATED = "escalated"


class Conversation(BaseModel):
    """
    A thread of messages between one user and the assistant.

    The status column is the only record of escalation; ``escalated`` is read
    from it so the two can never disagree.
    """

    __tablename__ = "conversations"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False, default=DEFAULT_CONVERSATION_TITLE)
    preview = Column(String(100), nullable=False, default="")
    status = Column(
        Enum(ConversationStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ConversationStatus.ACTIVE,
    )
    escalation_notes = Column(Text, nullable=False, default="")

    # Relationships
    user = relationship("User", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.created_at",
    )

    @property
    def escalated(self) -> bool:
        return self.status == ConversationStatus.ESCALATED

    @property
    def has_default_title(self) -> bool:
        return self.title in (None, DEFAULT_CONVERSATION_TITLE)


# Conversation lists are read newest first per user
Index(
    "ix_conversations_user_id_updated_at",
    Conversation.user_id,
    Conversation.updated_at.desc(),
)
