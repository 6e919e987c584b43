"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import CoursesError
from shared.logging_config import configure_logging
from .models.errors import ErrorResponse
from .routes import health, users
from modules.courses.routes import router as courses_router
from modules.likes.routes import router as likes_router
from modules.subscriptions.routes import router as subscriptions_router
from modules.subscriptions.routes import webhook_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Starting %s on %s:%s (storage: %s)",
        settings.app_name,
        settings.host,
        settings.port,
        settings.storage_backend,
    )
    if not settings.stripe_webhook_secret:
        logger.warning("STRIPE_WEBHOOK_SECRET not set; all webhooks will be rejected")
    yield
    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


async def courses_error_handler(request: Request, exc: CoursesError) -> JSONResponse:
    """Render unhandled CoursesError subclasses as ErrorResponse JSON."""
    if exc.status_code >= 500:
        logger.error("Unhandled %s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(**exc.to_dict()).model_dump(),
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Courses backend with row-level access control and Stripe subscriptions",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(CoursesError, courses_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(courses_router, prefix="/api/courses", tags=["courses"])
    app.include_router(likes_router, prefix="/api/likes", tags=["likes"])
    app.include_router(subscriptions_router, prefix="/api/subscriptions", tags=["subscriptions"])
    app.include_router(webhook_router, prefix="/api/webhooks", tags=["webhooks"])

    return app


# Application instance for uvicorn
app = create_app()
