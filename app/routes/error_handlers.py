"""
Exception handlers translating workflow errors into HTTP responses.

Server-side failures are logged with their cause; callers only ever receive a
generic detail message.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.infrastructure.observability.logging import get_logger
from app.models.domain.errors import NewsletterServiceError, status_code_for

logger = get_logger(__name__)


async def handle_service_error(request: Request, exc: NewsletterServiceError) -> JSONResponse:
    status_code = status_code_for(exc)
    log_data = {
        "path": request.url.path,
        "error": exc.message,
        "error_type": type(exc).__name__,
        "status_code": status_code,
    }
    if exc.cause is not None:
        log_data["cause"] = str(exc.cause)
        log_data["cause_type"] = type(exc.cause).__name__

    if status_code >= 500:
        logger.error("Request failed", **log_data)
    else:
        logger.warning("Request rejected", **log_data)

    return JSONResponse(status_code=status_code, content={"detail": exc.public_message})


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed or incomplete bodies and query strings are client errors (400, not 422)."""
    logger.warning(
        "Request validation failed",
        path=request.url.path,
        errors=[".".join(str(part) for part in err["loc"]) for err in exc.errors()],
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "Invalid request"}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NewsletterServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
