"""Support API controller with FastAPI endpoints."""

import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db, get_email_service, get_llm_gateway
from app.domains.support.service import SupportService
from app.exceptions.base import BaseAppException, InternalError
from app.schemas.base import ResponseSchema
from app.schemas.support import EscalationRequest
from app.services.email_service import EmailService
from app.services.llm_gateway import LLMGateway
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/support", tags=["support"])


@router.post("/escalate", response_model=ResponseSchema)
async def escalate_conversation(
    escalation: EscalationRequest = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
    notifier: EmailService = Depends(get_email_service),
):
    """Hand a conversation off to a human agent."""
    try:
        service = SupportService(db, gateway, notifier)
        result = await service.escalate(
            conversation_id=escalation.conversation_id,
            user_id=current_user.id,
            contact_email=str(escalation.email),
            notes=escalation.notes,
        )
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error escalating conversation: {str(e)}")
        raise InternalError("Failed to escalate conversation") from e

    return ResponseSchema(success=True, message=result.message, data=result.model_dump(mode="json"))
