# app/domains/user/service.py
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_password, password_fingerprint, token_manager, verify_password
from app.exceptions.auth import InvalidCredentialsError, TokenInvalidError, UserAlreadyExistsError
from app.schemas.support import NotificationResult
from app.services.email_service import EmailService
from models import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, ignoring case and surrounding whitespace."""
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def register(self, name: str, email: str, password: str) -> tuple[User, str]:
        """Create an account and return it with a fresh access token."""
        if await self.get_user_by_email(email):
            raise UserAlreadyExistsError()

        user = User(name=name, email=email, password_hash=hash_password(password))

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            await self.db.rollback()
            raise UserAlreadyExistsError() from e
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(f"Registered user {user.id}")
        return user, token_manager.create_access_token(user.id)

    async def authenticate(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and return the user with a fresh access token."""
        user = await self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return user, token_manager.create_access_token(user.id)

    async def request_password_reset(
        self, email: str, notifier: EmailService
    ) -> Optional[NotificationResult]:
        """Mail a reset link if the account exists.

        Returns None when there is no such account; callers must not reveal
        the difference.
        """
        user = await self.get_user_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email")
            return None

        token = token_manager.create_password_reset_token(user.id, user.password_hash)
        result = await notifier.send_password_reset(user.email, token)
        if not result.success:
            logger.error(f"Password reset email for user {user.id} failed: {result.error}")
        return result

    async def reset_password(self, token: str, new_password: str) -> User:
        """Set a new password using a token from the reset email."""
        user_id, fingerprint = token_manager.verify_password_reset_token(token)
        user = await self.get_user_by_id(user_id)
        # A changed password invalidates every reset token issued before it
        if not user or fingerprint != password_fingerprint(user.password_hash):
            raise TokenInvalidError()

        try:
            user.password_hash = hash_password(new_password)
            await self.db.commit()
            await self.db.refresh(user)
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(f"Password reset for user {user.id}")
        return user
