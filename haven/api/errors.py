"""
Failure envelopes.

Maps the application's typed errors onto HTTP status codes and a uniform
{"success": false, "error": {...}} body.
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from haven.core.exceptions import (
    AIResponderUnavailableError,
    AuthenticationError,
    HavenError,
    InfrastructureError,
    LLMError,
    NotFoundError,
    ValidationError,
)
from haven.core.logger import setup_logger

logger = setup_logger(__name__)

# Checked in order; the first matching base class wins.
_STATUS_CODES: list[tuple[type[HavenError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AIResponderUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (LLMError, status.HTTP_502_BAD_GATEWAY),
    (InfrastructureError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(error: HavenError) -> int:
    for error_type, code in _STATUS_CODES:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_envelope(code: str, message: str, details=None) -> dict:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = jsonable_encoder(details)
    return {"success": False, "error": error}


async def haven_error_handler(request: Request, exc: HavenError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    # Storage errors are reported generically.
    message = "Internal server error" if isinstance(exc, InfrastructureError) else exc.message
    details = None if isinstance(exc, InfrastructureError) else exc.details
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(exc.code, message, details),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope("validation_error", "Invalid request", exc.errors()),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HavenError, haven_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
