from __future__ import annotations

from typing import Any

import httpx

from stockdesk.core.logging import get_logger
from stockdesk.schemas.common import NETWORK_ERROR_CODE, QueryResult, ApiError

logger = get_logger(__name__)


def network_failure(exc: httpx.HTTPError, *, target: str) -> QueryResult[Any]:
    logger.warning("Request to %s failed: %s", target, exc)
    return QueryResult.failure(str(exc) or exc.__class__.__name__, NETWORK_ERROR_CODE)


def error_from_response(response: httpx.Response) -> ApiError:
    try:
        payload = response.json()
    except ValueError:
        payload = response.text
    return ApiError.from_payload(payload, fallback_code=str(response.status_code))


def json_result(response: httpx.Response) -> QueryResult[Any]:
    """Turn a response into the ``{data, error}`` pair without raising."""
    if response.is_error:
        error = error_from_response(response)
        logger.debug(
            "Store returned %s for %s %s: %s",
            response.status_code,
            response.request.method,
            response.request.url.path,
            error.message,
        )
        return QueryResult(error=error)

    if not response.content:
        return QueryResult(data=None)
    try:
        return QueryResult(data=response.json())
    except ValueError:
        return QueryResult.failure("Response body is not valid JSON", "PARSE_ERROR", details=response.text[:200])
