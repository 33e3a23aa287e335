from __future__ import annotations

from typing import Any

import httpx

from stockdesk.client.auth import AuthClient
from stockdesk.client.postgrest import PostgrestQueryBuilder, call_rpc
from stockdesk.client.storage import StorageClient
from stockdesk.core.config import settings
from stockdesk.core.logging import get_logger
from stockdesk.schemas.common import QueryResult
from stockdesk.services.exceptions import ConfigurationError

logger = get_logger(__name__)


class SupabaseClient:
    """Async facade over the hosted store's REST, auth and storage APIs."""

    def __init__(
        self,
        url: str,
        key: str,
        *,
        schema: str = "public",
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not url or not key:
            raise ConfigurationError("Supabase URL and anon key must both be configured")
        self.url = url.rstrip("/")
        self.key = key
        self.schema = schema
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self.rest_url = f"{self.url}/rest/v1"
        self.auth = AuthClient(http=self._http, auth_url=f"{self.url}/auth/v1", api_key=key)
        self.storage = StorageClient(http=self._http, storage_url=f"{self.url}/storage/v1", headers=self._headers)

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.auth.access_token or self.key}",
            "Accept-Profile": self.schema,
            "Content-Profile": self.schema,
        }

    def from_(self, table: str) -> PostgrestQueryBuilder:
        return PostgrestQueryBuilder(table, http=self._http, rest_url=self.rest_url, headers=self._headers)

    table = from_

    async def rpc(self, name: str, args: dict[str, Any] | None = None) -> QueryResult[Any]:
        return await call_rpc(self._http, self.rest_url, self._headers(), name, args)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_client(url: str | None = None, key: str | None = None, **kwargs: Any) -> SupabaseClient:
    """Build a client, falling back to ``SUPABASE_URL``/``SUPABASE_ANON_KEY``."""
    url = url or settings.SUPABASE_URL
    key = key or settings.SUPABASE_ANON_KEY
    if not url or not key:
        logger.error(
            "Supabase environment variables are missing",
            extra={"SUPABASE_URL": bool(url), "SUPABASE_ANON_KEY": bool(key)},
        )
        raise ConfigurationError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in the environment or .env file")
    kwargs.setdefault("schema", settings.SUPABASE_SCHEMA)
    kwargs.setdefault("timeout", settings.SUPABASE_TIMEOUT_SECONDS)
    return SupabaseClient(url, key, **kwargs)
