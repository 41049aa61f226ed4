"""
Application error types and user-facing error messages.

Every service maps failures onto one of the ErrorTypes codes so that clients
always receive one of a small, fixed set of messages.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import httpx
from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ErrorTypes:
    # Database
    DB_CONNECTION = "DB_CONNECTION"
    DB_QUERY = "DB_QUERY"
    DB_CONSTRAINT = "DB_CONSTRAINT"
    DB_NOT_FOUND = "DB_NOT_FOUND"

    # External APIs
    API_KEY_MISSING = "API_KEY_MISSING"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_RATE_LIMIT = "API_RATE_LIMIT"
    API_UNAUTHORIZED = "API_UNAUTHORIZED"

    # Auth
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_SESSION_EXPIRED = "AUTH_SESSION_EXPIRED"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"

    # Validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_INPUT = "INVALID_INPUT"
    REQUIRED_FIELD = "REQUIRED_FIELD"

    # Files
    FILE_UPLOAD_FAILED = "FILE_UPLOAD_FAILED"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_TYPE_INVALID = "FILE_TYPE_INVALID"

    # Network
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    OFFLINE = "OFFLINE"


UNKNOWN_ERROR = "UNKNOWN_ERROR"
UNKNOWN_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

ERROR_MESSAGES: Dict[str, str] = {
    ErrorTypes.DB_CONNECTION: "Unable to connect to database. Please try again later.",
    ErrorTypes.DB_QUERY: "Failed to retrieve data. Please refresh and try again.",
    ErrorTypes.DB_CONSTRAINT: "This operation violates data constraints. Please check your input.",
    ErrorTypes.DB_NOT_FOUND: "The requested data was not found.",

    ErrorTypes.API_KEY_MISSING: "API configuration is incomplete. Please contact support.",
    ErrorTypes.API_REQUEST_FAILED: "External service request failed. Please try again.",
    ErrorTypes.API_RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
    ErrorTypes.API_UNAUTHORIZED: "API authentication failed. Please check your credentials.",

    ErrorTypes.AUTH_INVALID_CREDENTIALS: "Invalid username or password.",
    ErrorTypes.AUTH_SESSION_EXPIRED: "Your session has expired. Please log in again.",
    ErrorTypes.AUTH_PERMISSION_DENIED: "You do not have permission to perform this action.",

    ErrorTypes.VALIDATION_FAILED: "Please check your input and try again.",
    ErrorTypes.INVALID_INPUT: "The provided input is invalid.",
    ErrorTypes.REQUIRED_FIELD: "Please fill in all required fields.",

    ErrorTypes.FILE_UPLOAD_FAILED: "File upload failed. Please try again.",
    ErrorTypes.FILE_TOO_LARGE: "File size exceeds the maximum allowed limit.",
    ErrorTypes.FILE_TYPE_INVALID: "This file type is not supported.",

    ErrorTypes.NETWORK_ERROR: "Network connection error. Please check your internet connection.",
    ErrorTypes.TIMEOUT: "Request timed out. Please try again.",
    ErrorTypes.OFFLINE: "You are currently offline. Please check your connection.",
}

# PostgreSQL / PostgREST error codes
SUPABASE_ERROR_CODES: Dict[str, str] = {
    "23505": ErrorTypes.DB_CONSTRAINT,  # unique violation
    "23503": ErrorTypes.DB_CONSTRAINT,  # foreign key violation
    "23502": ErrorTypes.REQUIRED_FIELD,  # not null violation
    "42P01": ErrorTypes.DB_NOT_FOUND,  # undefined table
    "42703": ErrorTypes.DB_QUERY,  # undefined column
    "PGRST116": ErrorTypes.DB_NOT_FOUND,  # no rows for .single()
    "PGRST301": ErrorTypes.AUTH_PERMISSION_DENIED,
}

_DEFAULT_STATUS: Dict[str, int] = {
    ErrorTypes.DB_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorTypes.DB_CONSTRAINT: status.HTTP_400_BAD_REQUEST,
    ErrorTypes.REQUIRED_FIELD: status.HTTP_400_BAD_REQUEST,
    ErrorTypes.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorTypes.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorTypes.FILE_TYPE_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorTypes.FILE_TOO_LARGE: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorTypes.AUTH_PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorTypes.AUTH_INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorTypes.AUTH_SESSION_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorTypes.API_RATE_LIMIT: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorTypes.API_UNAUTHORIZED: status.HTTP_502_BAD_GATEWAY,
    ErrorTypes.API_REQUEST_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorTypes.NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorTypes.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


class AppError(HTTPException):
    """HTTPException carrying one of the ErrorTypes codes."""

    def __init__(
        self,
        message: Optional[str] = None,
        code: str = ErrorTypes.DB_QUERY,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message or ERROR_MESSAGES.get(code, UNKNOWN_ERROR_MESSAGE)
        self.code = code
        self.details = details
        super().__init__(
            status_code=status_code or _DEFAULT_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail=self.message,
        )

    def __str__(self) -> str:
        return self.message


@dataclass
class ErrorInfo:
    message: str
    code: str
    details: Any = None
    should_report: bool = True


def map_supabase_error(code: Optional[str]) -> str:
    return SUPABASE_ERROR_CODES.get(code or "", ErrorTypes.DB_QUERY)


def is_not_found(exc: Exception) -> bool:
    """True for PostgREST 'no rows' errors raised by .single()."""
    return isinstance(exc, APIError) and exc.code == "PGRST116"


def is_duplicate(exc: Exception) -> bool:
    return isinstance(exc, APIError) and exc.code == "23505"


def handle_error(exc: Exception) -> ErrorInfo:
    """Classify an exception into a user-facing message and error code."""
    if isinstance(exc, AppError):
        return ErrorInfo(exc.message, exc.code, exc.details, exc.status_code >= 500)

    if isinstance(exc, APIError) and exc.code:
        code = map_supabase_error(exc.code)
        return ErrorInfo(ERROR_MESSAGES.get(code) or exc.message or UNKNOWN_ERROR_MESSAGE, code, exc.json(), True)

    if isinstance(exc, httpx.TimeoutException):
        return ErrorInfo(ERROR_MESSAGES[ErrorTypes.TIMEOUT], ErrorTypes.TIMEOUT, str(exc), False)

    if isinstance(exc, httpx.TransportError):
        return ErrorInfo(ERROR_MESSAGES[ErrorTypes.NETWORK_ERROR], ErrorTypes.NETWORK_ERROR, str(exc), False)

    if isinstance(exc, ValidationError):
        return ErrorInfo(ERROR_MESSAGES[ErrorTypes.VALIDATION_FAILED], ErrorTypes.VALIDATION_FAILED, exc.errors(), False)

    return ErrorInfo(UNKNOWN_ERROR_MESSAGE, UNKNOWN_ERROR, str(exc), True)


def get_error_message(exc: Exception) -> str:
    return handle_error(exc).message


def log_error(exc: Exception, context: Optional[Dict[str, Any]] = None) -> ErrorInfo:
    info = handle_error(exc)
    if info.should_report:
        logger.error("%s [%s] context=%s details=%s", info.message, info.code, context, info.details)
    else:
        logger.warning("%s [%s] context=%s", info.message, info.code, context)
    return info


def to_app_error(exc: Exception, fallback_code: str = ErrorTypes.DB_QUERY, message: Optional[str] = None) -> HTTPException:
    """Wrap an arbitrary exception for re-raising from a service. HTTPExceptions pass through."""
    if isinstance(exc, HTTPException):
        return exc
    info = handle_error(exc)
    code = info.code if info.code != UNKNOWN_ERROR else fallback_code
    return AppError(message or ERROR_MESSAGES.get(code), code, details=info.details)
