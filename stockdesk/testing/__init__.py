from stockdesk.testing.mock_client import (
    MockQueryBuilder,
    MockSupabaseClient,
    mock_error,
    mock_error_response,
    mock_response,
)

__all__ = [
    "MockQueryBuilder",
    "MockSupabaseClient",
    "mock_error",
    "mock_error_response",
    "mock_response",
]
