"""User authentication controller endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db, get_email_service
from app.domains.user.service import UserService
from app.exceptions.base import BaseAppException, InternalError
from app.schemas.base import ResponseSchema
from app.schemas.user import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
)
from app.services.email_service import EmailService
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

FORGOT_PASSWORD_MESSAGE = "If an account exists, reset link sent."


@router.post("/register", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def register(register_data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account and log it in."""
    try:
        user, token = await UserService(db).register(
            name=register_data.name,
            email=str(register_data.email),
            password=register_data.password,
        )
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Registration failed: {str(e)}")
        raise InternalError("Registration failed") from e

    return ResponseSchema(
        success=True,
        message="User created successfully",
        data=AuthResponse(token=token, user=UserResponse.model_validate(user)).model_dump(
            mode="json"
        ),
    )


@router.post("/login", response_model=ResponseSchema)
async def login(login_data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    try:
        user, token = await UserService(db).authenticate(
            email=str(login_data.email), password=login_data.password
        )
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {str(e)}")
        raise InternalError("Login failed") from e

    return ResponseSchema(
        success=True,
        message="Login successful",
        data=AuthResponse(token=token, user=UserResponse.model_validate(user)).model_dump(
            mode="json"
        ),
    )


@router.post("/forgot-password", response_model=ResponseSchema)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    notifier: EmailService = Depends(get_email_service),
):
    """Send a reset link. The answer is identical whether or not the account exists."""
    try:
        await UserService(db).request_password_reset(str(request_data.email), notifier)
    except Exception as e:
        logger.error(f"Forgot password failed: {str(e)}")
        raise InternalError("Failed to process request") from e

    return ResponseSchema(success=True, message=FORGOT_PASSWORD_MESSAGE, data=None)


@router.post("/reset-password", response_model=ResponseSchema)
async def reset_password(reset_data: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    """Set a new password with the token from the reset email."""
    try:
        await UserService(db).reset_password(reset_data.token, reset_data.password)
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Password reset failed: {str(e)}")
        raise InternalError("Failed to reset password") from e

    return ResponseSchema(success=True, message="Password updated successfully", data=None)


@router.get("/me", response_model=ResponseSchema)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return ResponseSchema(
        success=True,
        message=None,
        data=UserResponse.model_validate(current_user).model_dump(mode="json"),
    )
