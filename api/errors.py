"""
api/errors.py -- Map auth core error kinds to HTTP responses.

One table owns the mapping. Every handler returns the same ErrorResponse
envelope so API clients can parse errors uniformly:

    {"error": {"code": "...", "message": "...", "errors": [{"field", "message"}]}}

"errors" is present only for field-level validation failures.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.models import ErrorDetail, ErrorResponse, FieldErrorDetail
from auth.errors import (
    AccountInactiveError,
    AuthError,
    ConfigurationError,
    DuplicateAccountError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidStateError,
    NotFoundError,
    SelfActionForbiddenError,
    UnauthenticatedError,
    ValidationError,
)

logger = logging.getLogger("accessgate.api.errors")

# Looked up along the exception MRO, so the token errors resolve through
# UnauthenticatedError.
STATUS_BY_ERROR: dict[type[AuthError], int] = {
    ValidationError: 400,
    DuplicateAccountError: 400,
    InvalidStateError: 400,
    SelfActionForbiddenError: 400,
    InvalidCredentialsError: 401,
    UnauthenticatedError: 401,
    AccountInactiveError: 403,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConfigurationError: 500,
}


def status_for(exc: AuthError) -> int:
    for kind in type(exc).__mro__:
        if kind in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[kind]
    return 500


def _envelope(status_code: int, code: str, message: str, errors: list[FieldErrorDetail] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, errors=errors)).model_dump(
            exclude_none=True
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
            return _envelope(status_code, "internal_error", "An unexpected error occurred.")
        field_errors = None
        if isinstance(exc, ValidationError) and exc.field_errors:
            field_errors = [FieldErrorDetail(**fe.as_dict()) for fe in exc.field_errors]
        resp = _envelope(status_code, exc.code, exc.message, field_errors)
        if status_code == 401:
            resp.headers["WWW-Authenticate"] = "Bearer"
        return resp

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Request-shape failures use the same 400 field-level envelope as the core."""
        field_errors = [
            FieldErrorDetail(
                field=".".join(str(p) for p in err.get("loc", ()) if p != "body"),
                message=err.get("msg", "Invalid value"),
            )
            for err in exc.errors()
        ]
        return _envelope(400, ValidationError.code, ValidationError.default_message, field_errors)

    # Starlette's base class, so unmatched routes (404/405) share the envelope.
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        if isinstance(exc.detail, dict):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
        return _envelope(exc.status_code, f"http_{exc.status_code}", str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected server errors.

        The traceback goes to the server log only, never to the response body.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _envelope(500, "internal_error", "An unexpected error occurred.")
