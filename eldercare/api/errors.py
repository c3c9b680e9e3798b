"""Map exceptions to the JSON error envelope.

:func:`install_exception_handlers` registers one handler per exception family:

* :exc:`~eldercare.core.exceptions.RequestError` and subclasses answer with
  their own ``status_code`` and message.  Validation errors add the
  per-field ``errors`` list.
* FastAPI's own body validation (a missing or mistyped ``roomIds``) answers
  400 in the same shape as our validation errors.
* Unknown routes answer 404 ``Route <path> not found``.
* :exc:`~eldercare.core.exceptions.StoreError` and anything unexpected answer
  500 with a generic message.  The detail goes to the log only.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eldercare.api.schemas import ErrorResponse, FieldErrorItem
from eldercare.core.exceptions import RequestError, StoreError, ValidationError

__all__ = ["install_exception_handlers", "error_response"]

logger = logging.getLogger(__name__)

_SERVER_ERROR_MESSAGE = "Server Error"


def error_response(
    status_code: int,
    message: str,
    errors: Sequence[FieldErrorItem] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, errors=list(errors) if errors is not None else None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def _body_field(loc: Sequence[Any]) -> str:
    """``("body", "roomIds", 0)`` → ``"roomIds"``; a missing body → ``"body"``."""
    parts = [str(p) for p in loc if not isinstance(p, int)]
    if len(parts) > 1 and parts[0] in {"body", "query", "path"}:
        parts = parts[1:]
    return ".".join(parts) or "body"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_request_error(request: Request, exc: RequestError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    if isinstance(exc, ValidationError):
        return error_response(
            exc.status_code,
            exc.message,
            [FieldErrorItem(field=e.field, message=e.message) for e in exc.errors],
        )
    return error_response(exc.status_code, str(exc))


async def _handle_body_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldErrorItem(field=_body_field(err.get("loc", ())), message=err.get("msg", "Invalid value"))
        for err in exc.errors()
    ]
    logger.info(
        "Rejected %s %s: %d invalid field(s)", request.method, request.url.path, len(errors)
    )
    return error_response(400, "Invalid request body", errors)


async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(404, f"Route {request.url.path} not found")
    return error_response(exc.status_code, str(exc.detail))


async def _handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return error_response(500, _SERVER_ERROR_MESSAGE)


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, _SERVER_ERROR_MESSAGE)


def install_exception_handlers(app: FastAPI) -> None:
    """Register the error-envelope handlers on *app*."""
    app.add_exception_handler(RequestError, _handle_request_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_body_validation)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)  # type: ignore[arg-type]
    app.add_exception_handler(StoreError, _handle_store_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected)
