# ruff: noqa: D107
"""Authentication and account exceptions."""

from .base import ConflictError, UnauthorizedError


class TokenMissingError(UnauthorizedError):
    """Raised when a request carries no bearer token."""

    def __init__(self, message: str = "Access token required"):
        super().__init__(message=message, error_code="TOKEN_MISSING")


class TokenExpiredError(UnauthorizedError):
    """Raised when a token's validity window has passed."""

    def __init__(self, message: str = "Token expired"):
        super().__init__(message=message, error_code="TOKEN_EXPIRED")


class TokenInvalidError(UnauthorizedError):
    """Raised when a token cannot be decoded or does not name a known user."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, error_code="TOKEN_INVALID")


class InvalidCredentialsError(UnauthorizedError):
    """Raised on a failed login. Does not say which half was wrong."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, error_code="INVALID_CREDENTIALS")


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that is already taken."""

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message=message, error_code="USER_ALREADY_EXISTS")
