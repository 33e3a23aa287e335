# stockdesk/schemas/common.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")

NOT_FOUND_CODE = "PGRST116"
NETWORK_ERROR_CODE = "NETWORK_ERROR"


class ApiError(BaseModel):
    """Error payload returned by the store: ``{message, code, details, hint}``."""

    message: str
    code: str
    details: str | None = None
    hint: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_payload(cls, payload: Any, *, fallback_code: str) -> "ApiError":
        """Build an error from whatever JSON body the service returned.

        PostgREST uses ``message``/``code``; GoTrue and Storage use
        ``msg``/``error``/``error_description`` and sometimes a numeric code.
        """
        if not isinstance(payload, dict):
            text = str(payload) if payload not in (None, "") else "Unknown error"
            return cls(message=text, code=fallback_code)

        message = (
            payload.get("message")
            or payload.get("msg")
            or payload.get("error_description")
            or payload.get("error")
            or "Unknown error"
        )
        code = payload.get("error_code") or payload.get("code") or payload.get("statusCode") or fallback_code
        details = payload.get("details")
        hint = payload.get("hint")
        return cls(
            message=str(message),
            code=str(code),
            details=None if details is None else str(details),
            hint=None if hint is None else str(hint),
        )


@dataclass(frozen=True, slots=True)
class QueryResult(Generic[T]):
    """The ``{data, error}`` pair every terminal operation resolves to."""

    data: T | None = None
    error: ApiError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.data is not None:
            raise ValueError("QueryResult cannot carry both data and an error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str, code: str, details: str | None = None, hint: str | None = None) -> "QueryResult[Any]":
        return cls(data=None, error=ApiError(message=message, code=code, details=details, hint=hint))


def not_found_error(message: str = "JSON object requested, multiple (or no) rows returned") -> ApiError:
    return ApiError(message=message, code=NOT_FOUND_CODE)
