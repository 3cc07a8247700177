# task_api/core/error_handlers.py
"""
Single place that turns any failure into the API's error envelope.

    {"success": false, "error": "<summary>", "details": [...]?, "message": "..."?}

``details`` only appears for validation failures, ``message`` only for
unexpected failures while running with ENV=dev.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_api.core.config import Settings
from task_api.core.errors import (
    ErrorKind,
    FieldError,
    RecordNotFound,
    ResourceConflict,
    TaskApiError,
    UnexpectedError,
    ValidationFailure,
)

log = logging.getLogger(__name__)

_UNIQUE_VIOLATION_SQLSTATE = "23505"
_TRANSPORT_LOCATIONS = {"body", "query", "path", "header", "cookie"}

# kind -> (status, summary); one entry per ErrorKind
_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.VALIDATION: (400, "Validation error"),
    ErrorKind.NOT_FOUND: (404, "Resource not found"),
    ErrorKind.CONFLICT: (409, "Resource already exists"),
    ErrorKind.UNEXPECTED: (500, "Internal server error"),
}


def field_errors(errors: Iterable[dict]) -> list[FieldError]:
    """pydantic error dicts -> FieldError list, dropping FastAPI's body/query prefix."""
    out: list[FieldError] = []
    for err in errors:
        loc: Sequence = tuple(err.get("loc") or ())
        if loc and loc[0] in _TRANSPORT_LOCATIONS:
            loc = loc[1:]
        out.append(FieldError(".".join(str(p) for p in loc), err.get("msg", "")))
    return out


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    return "UNIQUE constraint failed" in str(orig)


def to_api_error(exc: BaseException) -> TaskApiError:
    if isinstance(exc, TaskApiError):
        return exc
    if isinstance(exc, (RequestValidationError, ValidationError)):
        return ValidationFailure(field_errors(exc.errors()))
    if isinstance(exc, NoResultFound):
        return RecordNotFound()
    if isinstance(exc, IntegrityError) and _is_unique_violation(exc):
        return ResourceConflict(str(exc.orig))
    return UnexpectedError(exc)


def error_response(error: TaskApiError, *, expose_details: bool = False) -> JSONResponse:
    status_code, summary = _RESPONSES[error.kind]
    body: dict = {"success": False, "error": summary}

    if error.kind is ErrorKind.VALIDATION:
        body["details"] = [d.as_dict() for d in error.details]
    elif error.kind is ErrorKind.UNEXPECTED and expose_details:
        body["message"] = error.message

    return JSONResponse(status_code=status_code, content=body)


def translate(exc: BaseException, *, expose_details: bool = False) -> JSONResponse:
    error = to_api_error(exc)
    if error.kind is ErrorKind.UNEXPECTED:
        log.error("Error: %s", exc, exc_info=(type(exc), exc, exc.__traceback__))
    else:
        log.warning("%s: %s", error.kind.value, error.message)
    return error_response(error, expose_details=expose_details)


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        return translate(exc, expose_details=settings.is_diagnostic)

    async def _handle_http(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # framework-level errors (unknown route, wrong method): same envelope, own status
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    for exc_type in (
        TaskApiError,
        RequestValidationError,
        ValidationError,
        NoResultFound,
        IntegrityError,
    ):
        app.add_exception_handler(exc_type, _handle)
    app.add_exception_handler(StarletteHTTPException, _handle_http)

    @app.middleware("http")
    async def _catch_unexpected(request: Request, call_next):
        # anything no handler claimed ends here; nothing reaches the server error layer
        try:
            return await call_next(request)
        except Exception as exc:
            return translate(exc, expose_details=settings.is_diagnostic)
