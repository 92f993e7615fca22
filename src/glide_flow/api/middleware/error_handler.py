"""Error handler middleware for FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...breakdown import GenerationError
from ...database import FlowNotFoundError, StepNotFoundError, StorageError

logger = logging.getLogger(__name__)

STORAGE_ERROR_DETAIL = "A storage error occurred. Please try again."


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail).model_dump(),
    )


async def _value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle ValueError exceptions.

    Returns:
        JSONResponse with 400 status and ErrorResponse body.
    """
    return _error(400, str(exc) if exc.args else "")


async def _lookup_error_handler(request: Request, exc: LookupError) -> JSONResponse:
    """Handle LookupError exceptions, including missing flows and steps.

    Returns:
        JSONResponse with 404 status and ErrorResponse body.
    """
    # Read exc.args to avoid KeyError quote wrapping
    if exc.args and exc.args[0]:
        error_message = str(exc.args[0])
    else:
        error_message = "Not found"
    return _error(404, error_message)


async def _generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    """Handle failed breakdown or split requests.

    GenerationError messages are already user-safe.

    Returns:
        JSONResponse with 502 status and ErrorResponse body.
    """
    return _error(502, str(exc))


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle storage failures with a fixed message.

    Returns:
        JSONResponse with 500 status and ErrorResponse body.
    """
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return _error(500, STORAGE_ERROR_DETAIL)


async def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions.

    Returns:
        JSONResponse with 500 status and sanitized error message.
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    # Never leak internal error details
    return _error(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers for the FastAPI application.

    Handlers are matched along the exception's MRO, so the not-found
    storage errors are registered explicitly ahead of StorageError.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(FlowNotFoundError, _lookup_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StepNotFoundError, _lookup_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(GenerationError, _generation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, _storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ValueError, _value_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(LookupError, _lookup_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
