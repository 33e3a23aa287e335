"""Classification of store errors into user-facing reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from stockdesk.core.logging import get_logger
from stockdesk.domain.enums import ErrorSeverity
from stockdesk.schemas.common import NETWORK_ERROR_CODE, ApiError, QueryResult
from stockdesk.services.exceptions import DataAccessError, ServiceError

logger = get_logger(__name__)

STORE_ERROR_MESSAGES: dict[str, str] = {
    "23505": "This record already exists. Please try a different value.",
    "23503": "A related record required for this operation was not found.",
    "23502": "A required field is missing. Please fill in all fields.",
    "42501": "You are not allowed to perform this operation.",
    "42P01": "Database table not found. Please contact the administrator.",
    "PGRST116": "Row not found or could not be updated.",
    "22P02": "Invalid data format. Please check the values you entered.",
}

AUTH_ERROR_MESSAGES: dict[str, str] = {
    "invalid_credentials": "Email or password is incorrect.",
    "user_not_found": "User not found.",
    "invalid_grant": "Your session has expired. Please sign in again.",
    "email_not_confirmed": "Please confirm your email address.",
    "weak_password": "Password is too weak. Choose a stronger one.",
}

TITLES: dict[ErrorSeverity, str] = {
    ErrorSeverity.INFO: "Info",
    ErrorSeverity.WARNING: "Warning",
    ErrorSeverity.ERROR: "Error",
    ErrorSeverity.CRITICAL: "Critical error",
}


@dataclass(frozen=True, slots=True)
class ErrorReport:
    message: str
    code: str
    severity: ErrorSeverity
    user_message: str
    details: Any = None

    @property
    def title(self) -> str:
        return TITLES[self.severity]


def severity_for_code(code: str) -> ErrorSeverity:
    if code.startswith("42"):
        return ErrorSeverity.CRITICAL
    if code.startswith("23"):
        return ErrorSeverity.WARNING
    return ErrorSeverity.ERROR


def _report_api_error(error: ApiError) -> ErrorReport:
    if error.code == NETWORK_ERROR_CODE:
        return ErrorReport(
            message=error.message,
            code=NETWORK_ERROR_CODE,
            severity=ErrorSeverity.ERROR,
            user_message="Connection error. Please check your internet connection.",
        )
    if error.code in AUTH_ERROR_MESSAGES:
        return ErrorReport(
            message=error.message,
            code=f"AUTH_{error.code}",
            severity=ErrorSeverity.WARNING,
            user_message=AUTH_ERROR_MESSAGES[error.code],
        )
    return ErrorReport(
        message=error.message,
        code=error.code,
        severity=severity_for_code(error.code),
        user_message=STORE_ERROR_MESSAGES.get(error.code, "A database error occurred."),
        details=error.details or error.hint,
    )


def describe_error(error: object) -> ErrorReport:
    """Map any error the data layer can produce to an :class:`ErrorReport`."""
    if isinstance(error, DataAccessError):
        return ErrorReport(
            message=error.detail,
            code=error.code,
            severity=error.severity,
            user_message=error.user_message,
            details=error.api_error.details if error.api_error else None,
        )
    if isinstance(error, ApiError):
        return _report_api_error(error)
    if isinstance(error, ServiceError):
        return ErrorReport(
            message=error.detail,
            code=type(error).__name__,
            severity=ErrorSeverity.WARNING,
            user_message=error.detail,
        )
    if isinstance(error, httpx.HTTPError):
        return ErrorReport(
            message=str(error),
            code=NETWORK_ERROR_CODE,
            severity=ErrorSeverity.ERROR,
            user_message="Connection error. Please check your internet connection.",
        )
    if isinstance(error, Exception):
        return ErrorReport(
            message=str(error),
            code="ERROR",
            severity=ErrorSeverity.ERROR,
            user_message="Something went wrong. Please try again.",
        )
    return ErrorReport(
        message=str(error),
        code="UNKNOWN_ERROR",
        severity=ErrorSeverity.ERROR,
        user_message="An unexpected error occurred.",
        details=error,
    )


def raise_for_error(result: QueryResult[Any], *, fallback_code: str, operation: str) -> Any:
    """Return ``result.data`` or raise ``DataAccessError`` built from ``result.error``."""
    if result.error is None:
        return result.data
    report = _report_api_error(result.error)
    logger.error(
        "%s failed: %s",
        operation,
        result.error.message,
        extra={"code": result.error.code, "details": result.error.details},
    )
    raise DataAccessError(
        result.error.message,
        code=result.error.code or fallback_code,
        severity=report.severity,
        user_message=report.user_message,
        api_error=result.error,
    )
