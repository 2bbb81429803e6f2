"""FastAPI application exposing the Mattermost actions over HTTP."""

from __future__ import annotations

import json

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mattermost_actions.accounts import list_enabled_accounts
from mattermost_actions.errors import (
    ConfigurationError,
    MattermostActionError,
    RemoteApiError,
    UnsupportedActionError,
    ValidationError,
)

from .config import get_settings
from .logging_config import configure_logging, logger
from .routes import api_router


def _status_for(exc: MattermostActionError) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, UnsupportedActionError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConfigurationError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(exc, RemoteApiError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# Register global exception handlers for consistent error responses across the API
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for adapter errors, 422, HTTP, and 500 errors."""

    @app.exception_handler(MattermostActionError)
    async def _action_exception_handler(request: Request, exc: MattermostActionError):
        code = _status_for(exc)
        logger.info(
            "action error",
            extra={"error": type(exc).__name__, "status": code, "path": str(request.url)},
        )
        return JSONResponse({"ok": False, "error": str(exc)}, status_code=code)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug("validation error", extra={"errors": exc.errors(), "path": str(request.url)})
        return JSONResponse(
            {"ok": False, "error": "Invalid request", "detail": jsonable_encoder(exc.errors())},
            status_code=422,
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        logger.debug(
            "http error",
            extra={"detail": exc.detail, "status": exc.status_code, "path": str(request.url)},
        )
        detail = exc.detail
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        return JSONResponse({"ok": False, "error": detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": str(request.url)})
        return JSONResponse(
            {"ok": False, "error": "Internal server error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


_settings = get_settings()
configure_logging(_settings.log_level)

app = FastAPI(
    title=_settings.app_name,
    version=_settings.app_version,
    docs_url=_settings.resolved_docs_url,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router)


@app.on_event("startup")
async def _startup() -> None:
    settings = get_settings()
    logger.info("Starting Mattermost actions server", extra={"version": settings.app_version})
    if not list_enabled_accounts(settings.host_config()):
        logger.warning("No usable Mattermost account: set MATTERMOST_URL and MATTERMOST_BOT_TOKEN")


__all__ = ["app"]
