# app/core/dependencies.py
import logging
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import token_manager
from app.database import get_db
from app.domains.user.service import UserService
from app.exceptions.auth import TokenInvalidError, TokenMissingError
from app.services.email_service import EmailService
from app.services.llm_gateway import LLMGateway
from models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

__all__ = [
    "get_current_user",
    "get_db",
    "get_email_service",
    "get_llm_gateway",
    "validate_token",
]


async def validate_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID:
    """Validate the bearer token and return the user id it was issued for.

    Raises:
        TokenMissingError: no Authorization header or an empty token
        TokenExpiredError: token past its validity window
        TokenInvalidError: anything else wrong with the token
    """
    if not credentials or not credentials.credentials:
        raise TokenMissingError()

    return token_manager.verify_token(credentials.credentials)


async def get_current_user(
    request: Request,
    user_id: UUID = Depends(validate_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the acting user from a verified token.

    Raises:
        TokenInvalidError: the token names a user that no longer exists
    """
    user = await UserService(db).get_user_by_id(user_id)
    if not user:
        logger.warning(f"Token for unknown user {user_id}")
        raise TokenInvalidError()

    # Add user info to request state for logging
    request.state.user_id = user.id

    return user


def get_llm_gateway(request: Request) -> LLMGateway:
    """The process-wide gateway created at startup."""
    return request.app.state.llm_gateway


def get_email_service(request: Request) -> EmailService:
    """The process-wide notifier created at startup."""
    return request.app.state.email_service
