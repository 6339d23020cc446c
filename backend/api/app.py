"""
FastAPI application factory.

Creates and configures the FastAPI application instance, registers the
route modules in a fixed order and maps domain exceptions onto HTTP
responses.
"""

import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config import get_settings
from shared.exceptions import (
    AccountsError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from shared.logging import configure_logging

from .dependencies import get_container
from .models import ApiErrorResponse, FieldError
from .routes import health
from modules.auth.routes import router as auth_router
from modules.users.routes import router as users_router

logger = logging.getLogger(__name__)

# (router, prefix, tag) in registration order
ROUTERS: tuple[tuple[APIRouter, str, str], ...] = (
    (health.router, "/api", "health"),
    (auth_router, "/api/auth", "auth"),
    (users_router, "/api/users", "users"),
)

# Checked in order; first match wins
STATUS_BY_ERROR: tuple[tuple[type[AccountsError], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StorageUnavailableError, 503),
)


def status_for(exc: AccountsError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _error_response(status_code: int, body: ApiErrorResponse, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def accounts_error_handler(request: Request, exc: AccountsError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    body = ApiErrorResponse(
        message=exc.message,
        errors=[FieldError(message=exc.message, code=exc.code)],
    )
    return _error_response(status_code, body, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors (unknown route, wrong method) in the same envelope."""
    message = str(exc.detail)
    try:
        code = HTTPStatus(exc.status_code).name
    except ValueError:
        code = "HTTP_ERROR"
    body = ApiErrorResponse(message=message, errors=[FieldError(message=message, code=code)])
    return _error_response(exc.status_code, body, exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(
            # Drop the "body"/"query"/"path" prefix
            field=".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            message=error["msg"],
            code=error["type"],
        )
        for error in exc.errors()
    ]
    return _error_response(400, ApiErrorResponse(message="Validation failed", errors=errors))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return _error_response(500, ApiErrorResponse(message=message))


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
        "Starting %s on %s:%s (storage=%s)",
        settings.app_name,
        settings.host,
        settings.port,
        settings.storage_backend,
    )
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; token operations will fail")
    # Build the decoy digest up front so the first failed login is not slower
    await run_in_threadpool(get_container().hasher.verify_decoy, "")
    yield
    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="User accounts, authentication and session tokens",
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

    app.add_exception_handler(AccountsError, accounts_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    for router, prefix, tag in ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    return app


# Application instance for uvicorn
app = create_app()
