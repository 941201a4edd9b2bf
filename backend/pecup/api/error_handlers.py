"""Error Handlers — every failure leaves the API as {"error": {...}}.

Invariants:
    - PecupError renders its own to_response() at its http_status; an
      InputValidationError with a field adds "field" to the envelope
    - RequestValidationError -> 400; message names the first offending field,
      "details" lists all of them
    - Framework HTTP errors (unknown route, wrong method) use the same envelope
    - Anything else -> 500 with a fixed message; the traceback is only logged

Design Decisions:
    - 4xx logged at WARNING, 5xx at ERROR: client mistakes should not page anyone
    - The multipart path raises RequestValidationError itself (api/request_body.py)
      so form and JSON bodies fail identically
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pecup.core.errors import (
    ErrorCategory, ErrorSeverity, InputValidationError, PecupError,
)

logger = logging.getLogger(__name__)

_HTTP_CATEGORIES = {
    401: ErrorCategory.AUTHENTICATION,
    403: ErrorCategory.AUTHORIZATION,
    404: ErrorCategory.RESOURCE_NOT_FOUND,
}


def error_envelope(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    **extra,
) -> dict:
    body = {
        "code": code,
        "message": message,
        "category": category.value,
        "severity": severity.value,
    }
    body.update(extra)
    return {"error": body}


def validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]


async def handle_pecup_error(request: Request, exc: PecupError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    content = exc.to_response()
    if isinstance(exc, InputValidationError) and exc.field:
        content["error"]["field"] = exc.field
    return JSONResponse(status_code=exc.http_status, content=content)


async def handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = validation_details(exc)
    logger.warning(
        f"Rejected body on {request.url.path}: {len(details)} error(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    if details:
        first = details[0]
        message = f"Invalid {first['field']}: {first['message']}"
    else:
        message = "Invalid request data"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            "VALIDATION_ERROR", message, ErrorCategory.VALIDATION, details=details,
        ),
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    category = _HTTP_CATEGORIES.get(exc.status_code, ErrorCategory.VALIDATION)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(
            f"HTTP_{exc.status_code}", str(exc.detail), category,
            ErrorSeverity.WARNING,
        ),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PecupError, handle_pecup_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
