"""Translate core exceptions into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from echo_stage.core.errors import (
    ConflictError,
    EchoError,
    InternalError,
    NotAuthorizedError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[EchoError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(exc: EchoError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_echo_error(request: Request, exc: EchoError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


async def _handle_value_error(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def _handle_store_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers mapping core errors to status codes."""
    app.add_exception_handler(EchoError, _handle_echo_error)
    app.add_exception_handler(ValueError, _handle_value_error)
    app.add_exception_handler(SQLAlchemyError, _handle_store_error)
