"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from passgate.api.health import router as health_router
from passgate.config import Settings, get_settings
from passgate.infrastructure.database import open_database
from passgate.infrastructure.observability import (
    init_observability,
    shutdown_observability,
)
from passgate.modules.auth.exceptions import CredentialStoreError
from passgate.modules.auth.repository import AuditLogRepository, UserRepository
from passgate.modules.auth.routes import router as auth_router
from passgate.modules.auth.service import AuthService
from passgate.modules.auth.tokens import TokenIssuer

logger = structlog.get_logger()


async def credential_store_error_handler(
    _request: Request, exc: CredentialStoreError
) -> JSONResponse:
    """Answer unexpected store failures with an opaque 500."""
    logger.error(
        "credential_store_error",
        operation=exc.operation,
        error=exc.reason,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.

    Returns:
        Configured FastAPI app. Resources are opened by its lifespan.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Open the database and wire the auth service; close on shutdown."""
        tokens = TokenIssuer.from_settings(settings)
        database = await open_database(settings.database_path)

        app.state.database = database
        app.state.auth_service = AuthService(
            UserRepository(database),
            AuditLogRepository(database),
            tokens,
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        logger.info("auth_service_initialized")

        try:
            yield
        finally:
            await database.disconnect()
            shutdown_observability()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    init_observability(
        settings.app_name,
        settings.app_version,
        otlp_endpoint=settings.otel_endpoint,
        console_export=settings.otel_console_export,
        enabled=settings.otel_enabled,
        sample_rate=settings.otel_sample_rate,
        debug=settings.debug,
        app=app,
    )

    app.add_exception_handler(
        CredentialStoreError,
        credential_store_error_handler,  # type: ignore[arg-type]
    )

    app.include_router(health_router, prefix="/health", tags=["health"])
    app.include_router(auth_router)

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("passgate.main:app", host=settings.host, port=settings.port)
