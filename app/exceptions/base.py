# ruff: noqa: D107
"""Base exception classes."""

from typing import Any

from fastapi import HTTPException


class BaseAppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={"message": message, "error_code": error_code, "details": self.details},
            headers=headers,
        )


class UnauthorizedError(BaseAppException):
    """Exception raised when the caller's credential is missing or unusable."""

    def __init__(
        self,
        message: str = "Unauthorized",
        error_code: str = "UNAUTHORIZED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFoundError(BaseAppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: str = "NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=404, error_code=error_code, details=details)


class ConflictError(BaseAppException):
    """Exception raised when a resource already exists."""

    def __init__(
        self,
        message: str = "Resource already exists",
        error_code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=409, error_code=error_code, details=details)


class ValidationError(BaseAppException):
    """Exception raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class UpstreamUnavailableError(BaseAppException):
    """Exception raised when an external collaborator (AI, email) fails."""

    def __init__(
        self,
        message: str = "Upstream service unavailable",
        error_code: str = "UPSTREAM_UNAVAILABLE",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=503, error_code=error_code, details=details)


class InternalError(BaseAppException):
    """Exception raised for unanticipated failures. Carries no internal detail."""

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message=message, status_code=500, error_code="INTERNAL_ERROR")
