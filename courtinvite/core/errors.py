"""
Application errors and their HTTP handlers.

Every domain failure is raised as an AppError subclass carrying a
human-readable message and a coarse error code. The handlers registered in
main.py render them as ``{"ok": false, "error": ..., "code": ...}`` so the
front end can show a toast and let the user try again.
"""

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, OperationalError

logger = logging.getLogger(__name__)


class ErrorCode:
    """Error codes surfaced to clients"""
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    LIMIT_REACHED = "LIMIT_REACHED"
    INVALID_NAME = "INVALID_NAME"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_NOT_OPEN = "SESSION_NOT_OPEN"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_GUEST_TOKEN = "INVALID_GUEST_TOKEN"
    CONFLICT = "CONFLICT"
    STORAGE_ERROR = "STORAGE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    INVALID_IMAGE = "INVALID_IMAGE"
    INVALID_INPUT = "INVALID_INPUT"


class AppError(Exception):
    """Base application error with structured information"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class CapacityExceededError(AppError):
    def __init__(self, message: str = "Session is full", details: Optional[dict] = None):
        super().__init__(
            message=message,
            code=ErrorCode.CAPACITY_EXCEEDED,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class LimitReachedError(AppError):
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            code=ErrorCode.LIMIT_REACHED,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class InvalidNameError(AppError):
    def __init__(self, message: str = "Name is required"):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_NAME,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class SessionNotFoundError(AppError):
    def __init__(self, message: str = "Session not found"):
        super().__init__(
            message=message,
            code=ErrorCode.SESSION_NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class SessionNotOpenError(AppError):
    def __init__(self, session_status: str):
        super().__init__(
            message=f"Session is {session_status}. Only open sessions can be joined.",
            code=ErrorCode.SESSION_NOT_OPEN,
            status_code=status.HTTP_409_CONFLICT,
            details={"session_status": session_status},
        )


class NotFoundError(AppError):
    def __init__(self, message: str):
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class PermissionDeniedError(AppError):
    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            message=message,
            code=ErrorCode.FORBIDDEN,
            status_code=status.HTTP_403_FORBIDDEN,
        )


class ConflictError(AppError):
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            code=ErrorCode.CONFLICT,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class InvalidInputError(AppError):
    """Well-formed input that conflicts with the stored record"""
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_INPUT,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class InvalidGuestTokenError(AppError):
    def __init__(self, message: str = "Invalid guest token"):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_GUEST_TOKEN,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class InvalidImageError(AppError):
    def __init__(self, message: str = "Invalid image"):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_IMAGE,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class StorageError(AppError):
    """Object storage upload/delete failures"""
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
        )


async def app_error_handler(request: Request, error: AppError) -> JSONResponse:
    """Render a structured application error"""
    log = logger.warning if error.status_code < 500 else logger.error
    log(
        f"Application error: {error.code} on {request.method} {request.url.path}",
        extra={
            "code": error.code,
            "error_message": error.message,
            "status_code": error.status_code,
            "path": request.url.path,
            "details": error.details,
        },
    )

    content = {"ok": False, "error": error.message, "code": error.code}
    if error.details:
        content["details"] = error.details
    return JSONResponse(status_code=error.status_code, content=content)


async def database_error_handler(request: Request, error: SQLAlchemyError) -> JSONResponse:
    """Render a database failure without leaking driver details"""
    is_connection_error = isinstance(error, OperationalError)
    logger.error(
        f"Database error: {type(error).__name__}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=503 if is_connection_error else 500,
        content={
            "ok": False,
            "error": "Database operation failed. Please try again.",
            "code": ErrorCode.DATABASE_ERROR,
        },
    )
