# stockdesk/services/exceptions.py
from __future__ import annotations

from typing import TYPE_CHECKING

from stockdesk.domain.enums import ErrorSeverity

if TYPE_CHECKING:
    from stockdesk.schemas.common import ApiError


class ServiceError(Exception):
    """Base class for service-layer errors."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class DomainValidationError(ServiceError):
    """Invalid domain input or record shape."""
    pass


class InvalidTagError(DomainValidationError):
    """A closed-tag field carried a value outside its enumeration."""

    def __init__(self, field: str, value: object, allowed: list[str]):
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(f"Invalid {field} {value!r}; expected one of {', '.join(allowed)}")


class ResourceNotFoundError(ServiceError):
    """Resource not found."""
    pass


class ConflictError(ServiceError):
    """Operation conflicts with the current state of the store."""
    pass


class ConfigurationError(ServiceError):
    """Required client configuration is missing."""
    pass


class DataAccessError(ServiceError):
    """The store answered a request with an error payload."""

    def __init__(
        self,
        detail: str,
        *,
        code: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        user_message: str | None = None,
        api_error: ApiError | None = None,
    ):
        super().__init__(detail)
        self.code = code
        self.severity = severity
        self.user_message = user_message or detail
        self.api_error = api_error
