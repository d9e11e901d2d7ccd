"""Chat API controller with FastAPI endpoints."""

import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db, get_llm_gateway
from app.domains.chat.service import ChatService
from app.exceptions.base import BaseAppException, InternalError
from app.schemas.base import ResponseSchema
from app.schemas.chat import ChatRequest
from app.services.llm_gateway import LLMGateway
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("/message", response_model=ResponseSchema)
async def send_chat_message(
    chat_request: ChatRequest = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Send a message to the support assistant.

    The reply is always returned; when the model could not be reached it is
    an apology and ``generation_succeeded`` is false.
    """
    try:
        service = ChatService(db, gateway)
        result = await service.send_message(
            conversation_id=chat_request.conversation_id,
            user_id=current_user.id,
            text=chat_request.message,
        )
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in chat: {str(e)}")
        raise InternalError("Failed to send message") from e

    return ResponseSchema(
        success=True,
        message="Message sent successfully",
        data=result.model_dump(mode="json"),
    )
