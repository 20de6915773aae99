"""Error Handlers — one JSON error envelope for every failure an Endurance app serves.

Invariants:
    - Every error body is {"error": {code, message, category, severity, path, ...}}
    - EnduranceError keeps its own code, category and http_status
    - 404/405 from the router (unmatched module paths) use NOT_FOUND / METHOD_NOT_ALLOWED
    - RequestValidationError → 400 with one entry per offending field
    - Anything else → 500; the body never carries the exception text
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from endurance.core.errors import EnduranceError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: ("NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", ErrorCategory.HTTP),
}


def error_body(
    request: Request,
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    **fields,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            "path": request.url.path,
            **fields,
        },
    }


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EnduranceError, _endurance_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)


async def _endurance_error(request: Request, exc: EnduranceError) -> JSONResponse:
    logger.error(
        exc.message,
        extra={"error_code": exc.code, "path": request.url.path, "unit_path": exc.context.unit_path},
    )
    body = exc.to_response()
    body["error"]["path"] = request.url.path
    return JSONResponse(status_code=exc.http_status, content=body)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code, category = HTTP_ERROR_CODES.get(exc.status_code, ("HTTP_ERROR", ErrorCategory.HTTP))
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {exc.detail}", extra={"path": request.url.path})
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, code, str(exc.detail), category, ErrorSeverity.WARNING),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request with {len(details)} invalid fields",
        extra={"path": request.url.path, "error_code": "VALIDATION_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            request, "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} in a module route",
        exc_info=exc,
        extra={"path": request.url.path, "error_code": "INTERNAL_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            request, "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )
