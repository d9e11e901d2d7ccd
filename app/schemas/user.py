"""User-related Pydantic schemas for request/response validation."""

from pydantic import EmailStr, Field, field_validator

from .base import BaseModelSchema, BaseSchema


class RegisterRequest(BaseSchema):
    """Schema for account registration."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=6, max_length=128, description="Plain-text password")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that name is not blank."""
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class LoginRequest(BaseSchema):
    """Schema for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class ForgotPasswordRequest(BaseSchema):
    email: EmailStr


class ResetPasswordRequest(BaseSchema):
    token: str = Field(..., min_length=1, description="Token from the reset email")
    password: str = Field(..., min_length=6, max_length=128, description="New password")


class UserResponse(BaseModelSchema):
    """Public view of a user. Never includes the password hash."""

    name: str
    email: str


class AuthResponse(BaseSchema):
    """Token plus the user it was issued for."""

    token: str
    user: UserResponse
