"""AI Customer Support API - Main Application Module.

This module initializes the FastAPI application with proper configuration,
middleware, routing, and lifecycle management for the support chat backend.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigValidator, get_config_summary, settings
from app.database import AsyncSessionLocal, engine
from app.services.email_service import EmailService
from app.services.llm_gateway import GeminiGateway
from models import Base

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure the root logger from settings."""
    logging.basicConfig(
        level=settings.log_level.value,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle events."""
    # Startup
    logger.info("🚀 Starting AI Customer Support API...")

    ConfigValidator.validate_required_settings()
    logger.info(f"Configuration: {get_config_summary()}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables created/verified")

    # Shared by every request for the life of the process
    app.state.llm_gateway = GeminiGateway()
    app.state.email_service = EmailService()
    if not app.state.llm_gateway.is_configured:
        logger.warning("GEMINI_API_KEY not set; replies will use the fallback message")

    yield

    # Shutdown
    logger.info("🛑 Shutting down AI Customer Support API...")
    await engine.dispose()
    logger.info("✅ Database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Customer support chat with AI replies and human escalation",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def _error_response(request: Request, status_code: int, content: dict, headers=None):
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            **content,
            "timestamp": datetime.now(UTC).isoformat(),
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        return _error_response(
            request,
            exc.status_code,
            {"message": message, "error_code": error_code, "details": details},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            errors.append(error_dict)

        return _error_response(
            request,
            422,
            {"message": "Validation error", "error_code": "VALIDATION_ERROR", "details": errors},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error: {str(exc)}")
        return _error_response(
            request,
            500,
            {"message": "Internal server error", "error_code": "INTERNAL_ERROR", "details": None},
        )


def setup_routers(app: FastAPI):
    """Configure application routers."""
    # Import routers
    from app.domains.chat.controller import router as chat_router
    from app.domains.conversation.controller import router as conversation_router
    from app.domains.support.controller import router as support_router
    from app.domains.user.controller import router as user_router

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        db_status = "healthy"
        try:
            async with AsyncSessionLocal() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database health check failed: {str(e)}")
            db_status = "unhealthy"

        gateway = getattr(request.app.state, "llm_gateway", None)
        ai_status = "configured" if gateway is not None and gateway.is_configured else "not_configured"

        return JSONResponse(
            status_code=200 if db_status == "healthy" else 503,
            content={
                "success": db_status == "healthy",
                "status": "healthy" if db_status == "healthy" else "degraded",
                "version": settings.version,
                "environment": settings.environment.value,
                "timestamp": datetime.now(UTC).isoformat(),
                "services": {
                    "database": db_status,
                    "ai_service": ai_status,
                },
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "success": True,
            "name": settings.app_name,
            "version": settings.version,
            "description": "AI customer support with human escalation",
            "docs_url": "/docs" if settings.is_development else None,
        }

    # Include domain routers
    app.include_router(user_router)
    app.include_router(conversation_router)
    app.include_router(chat_router)
    app.include_router(support_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
