"""
FastAPI application factory.

Installs the request correlation middleware, the exception handlers mapping
domain errors to the response envelope, and the auth and migration routers.
"""

import logging
import secrets
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from subtrack.application.config_loader import ConfigLoader
from subtrack.domain.exceptions import SubTrackError, ValidationError
from subtrack.infrastructure.container import DIContainer
from subtrack.infrastructure.monitoring.logging import (
    correlation_context,
    setup_structured_logging,
)

from .auth_routes import router as auth_router
from .migration_routes import router as migration_router
from .responses import error_response

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Request ID middleware.

    Honors an incoming ``X-Request-ID`` or generates one, and makes it the
    correlation id of every log record emitted while handling the request.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        request_id = request.headers.get("X-Request-ID") or f"req_{secrets.token_urlsafe(16)}"
        request.state.request_id = request_id

        with correlation_context(request_id):
            response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response  # type: ignore[no-any-return]


async def _handle_domain_error(request: Request, exc: SubTrackError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
    return error_response(exc)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    ]
    return error_response(ValidationError("Invalid request", errors=errors))


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": "INTERNAL_SERVER_ERROR",
        },
    )


def create_app(container: DIContainer | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Wired dependencies; built from the environment when omitted
    """
    if container is None:
        config = ConfigLoader.from_env()
        setup_structured_logging(
            level=config.logging.level,
            format_type=config.logging.format_type,
            log_file=config.logging.file,
        )
        container = DIContainer(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        container.initialize()
        logger.info("SubTrack API started")
        yield
        container.cleanup()
        logger.info("SubTrack API stopped")

    app = FastAPI(
        title="SubTrack API",
        description="Authentication and legacy data migration for SubTrack",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(SubTrackError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, _handle_request_validation  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, _handle_unexpected)

    app.include_router(auth_router)
    app.include_router(migration_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
