"""Conversation API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db
from app.domains.conversation.service import ConversationService
from app.exceptions.base import BaseAppException, InternalError
from app.schemas.base import ResponseSchema
from app.schemas.conversation import ConversationCreateResponse, MessageResponse
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.post("", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Start a new, empty conversation."""
    try:
        conversation = await ConversationService(db).create_conversation(current_user.id)
    except Exception as e:
        logger.error(f"Error creating conversation: {str(e)}")
        raise InternalError("Failed to create conversation") from e

    return ResponseSchema(
        success=True,
        message="Conversation created successfully",
        data=ConversationCreateResponse(
            conversation_id=conversation.id, timestamp=conversation.created_at
        ).model_dump(mode="json"),
    )


@router.get("", response_model=ResponseSchema)
async def list_conversations(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(50, ge=1, le=100, description="Page size"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's conversations, most recently updated first."""
    try:
        result = await ConversationService(db).list_conversations(
            user_id=current_user.id, page=page, size=size
        )
    except Exception as e:
        logger.error(f"Error retrieving conversations: {str(e)}")
        raise InternalError("Failed to load conversations") from e

    return ResponseSchema(
        success=True,
        message="Conversations retrieved successfully",
        data=result.model_dump(mode="json"),
    )


@router.get("/{conversation_id}/messages", response_model=ResponseSchema)
async def list_messages(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get every message of a conversation, oldest first."""
    try:
        messages = await ConversationService(db).list_messages(conversation_id, current_user.id)
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving messages: {str(e)}")
        raise InternalError("Failed to load messages") from e

    return ResponseSchema(
        success=True,
        message="Messages retrieved successfully",
        data=[MessageResponse.model_validate(msg).model_dump(mode="json") for msg in messages],
    )


@router.delete("/{conversation_id}", response_model=ResponseSchema)
async def delete_conversation(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a conversation together with its messages."""
    try:
        await ConversationService(db).delete_conversation(conversation_id, current_user.id)
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error deleting conversation: {str(e)}")
        raise InternalError("Failed to delete conversation") from e

    return ResponseSchema(success=True, message="Conversation deleted successfully", data=None)
