"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import httpx
from postgrest.exceptions import APIError

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BaabaError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

from .config import get_settings
from .dependencies import ServiceContainer
from .routes import auth, dashboard, health, users

logger = logging.getLogger(__name__)

# Checked in order; the first matching base class wins
ERROR_STATUS_CODES: list[tuple[type[BaabaError], int]] = [
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ExternalServiceError, 502),
]


def status_code_for(error: BaabaError) -> int:
    """Map a BaabaError to an HTTP status code."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


async def handle_baaba_error(request: Request, exc: BaabaError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# Raw failures from the Supabase storage client that reach the API
STORAGE_ERRORS: tuple[type[Exception], ...] = (APIError, httpx.HTTPError, ConnectionError)


async def handle_storage_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a storage transport failure as a retry-able 502."""
    logger.warning(f"{request.method} {request.url.path} storage failure: {exc!r}")
    error = ExternalServiceError(
        str(exc) or exc.__class__.__name__,
        service="supabase",
        code="STORAGE_UNAVAILABLE",
    )
    return JSONResponse(status_code=502, content=error.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Starts the session core (auth event subscription and bootstrap) and
    cancels the subscription at shutdown.
    """
    settings = get_settings()
    logger.info(f"Starting Baaba API on {settings.host}:{settings.port}")

    session = app.state.container.session
    await session.start()
    try:
        yield
    finally:
        await session.close()
        logger.info("Shutting down Baaba API")


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Service container to use; a default Supabase-backed
            container is created when omitted

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    container = container or ServiceContainer()

    app = FastAPI(
        title="Baaba API",
        description="Session and role authorization for the Baaba student housing marketplace",
        version=container.settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )
    app.state.container = container

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(BaabaError, handle_baaba_error)
    for error_type in STORAGE_ERRORS:
        app.add_exception_handler(error_type, handle_storage_error)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

    return app


# Application instance for uvicorn
app = create_app()
