import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..database.config import settings
from .exceptions import AppError
from .responses import error_body

logger = logging.getLogger(__name__)


def _log_error(request: Request, exc: Exception, status_code: int, message: str) -> None:
    context = (
        f"{request.method} {request.url.path} status={status_code} "
        f"user_id={getattr(request.state, 'user_id', None)}"
    )
    if status_code >= 500:
        logger.error(f"❌ {context}: {message}", exc_info=exc)
    else:
        logger.warning(f"⚠️ {context}: {message}")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    _log_error(request, exc, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.code, exc.message, exc.details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = {}
    for error in exc.errors():
        # ("body", "latitude") -> "latitude"
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        details[field or "request"] = error.get("msg", "Invalid value")

    message = "Invalid request data"
    _log_error(request, exc, status.HTTP_400_BAD_REQUEST, f"{message} {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(request, "VALIDATION_ERROR", message, details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"

    _log_error(request, exc, exc.status_code, message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, f"HTTP_{exc.status_code}", message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    message = "Internal server error" if settings.is_production else str(exc)
    _log_error(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(request, "INTERNAL_ERROR", message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
