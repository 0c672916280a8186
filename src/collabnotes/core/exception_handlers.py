"""
Exception handlers.

Convert application exceptions into ErrorResponse payloads. Client errors
are logged at WARNING, anything unexpected at ERROR with a generic body.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .exceptions import ApplicationError, ValidationError
from .logging import get_logger
from .schemas.common import ErrorResponse

logger = get_logger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


def error_response(exc: ApplicationError) -> JSONResponse:
    """Build the JSON response for an application error."""
    body = ErrorResponse(
        error=exc.code,
        message=exc.message,
        details=exc.details or None,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    log_extra = {
        "code": exc.code,
        "status": exc.status_code,
        "path": request.url.path,
        "method": request.method,
        "request_id": _request_id(request),
    }
    if exc.status_code >= 500:
        logger.error(exc.message, extra=log_extra)
    else:
        logger.warning(exc.message, extra=log_extra)
    return error_response(exc)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details: dict[str, str] = {}
    for err in exc.errors():
        # drop the "body"/"query" prefix so clients get plain field names
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        details.setdefault(field, err.get("msg", "Invalid value"))

    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "fields": list(details), "request_id": _request_id(request)},
    )
    return error_response(ValidationError(details=details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method, "request_id": _request_id(request)},
    )
    return error_response(ApplicationError("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all handlers on the app."""
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
