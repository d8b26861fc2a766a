"""
Application errors and their HTTP translation
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger

from ausflug.core.config import settings


class AppError(Exception):
    """Base error carrying an error code and an HTTP status"""

    def __init__(self, code: str, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    def __init__(self, message: str, details: Any = None):
        super().__init__("VALIDATION_ERROR", 400, message, details)


class NotFoundError(AppError):
    def __init__(self, resource: str, id: Any = None):
        if id is not None:
            message = f"{resource} mit ID {id} nicht gefunden"
        else:
            message = f"{resource} nicht gefunden"
        super().__init__("NOT_FOUND", 404, message)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Nicht angemeldet"):
        super().__init__("UNAUTHORIZED", 401, message)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Keine Berechtigung"):
        super().__init__("FORBIDDEN", 403, message)


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__("CONFLICT", 409, message)


class RateLimitError(AppError):
    def __init__(self, message: str = "Zu viele Anfragen, bitte später erneut versuchen", retry_after: Optional[int] = None):
        super().__init__("TOO_MANY_REQUESTS", 429, message)
        self.retry_after = retry_after


class InternalError(AppError):
    def __init__(self, message: str = "Interner Serverfehler", details: Any = None):
        super().__init__("INTERNAL_ERROR", 500, message, details)


def handle_error(error: Exception, context: str = "") -> AppError:
    """Convert any exception into an AppError and log it with context"""
    prefix = f"[{context}] " if context else ""

    if isinstance(error, AppError):
        logger.warning(f"{prefix}{error.code}: {error.message}")
        return error

    message = str(error)
    lowered = message.lower()
    logger.error(f"{prefix}Unerwarteter Fehler: {message}")

    if "not found" in lowered:
        return AppError("NOT_FOUND", 404, message)
    if "unauthorized" in lowered:
        return UnauthorizedError(message)
    if "forbidden" in lowered:
        return ForbiddenError(message)
    return InternalError(message if settings.DEBUG else "Interner Serverfehler")


def format_error_response(error: AppError) -> JSONResponse:
    headers = None
    if isinstance(error, RateLimitError) and error.retry_after:
        headers = {"Retry-After": str(error.retry_after)}
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.code} {exc.message}")
    return format_error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = jsonable_encoder(exc.errors())
    return format_error_response(ValidationError("Ungültige Eingabe", details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"❌ Unbehandelter Fehler bei {request.method} {request.url.path}: {exc}")
    message = str(exc) if settings.DEBUG else "Interner Serverfehler"
    return format_error_response(InternalError(message))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
