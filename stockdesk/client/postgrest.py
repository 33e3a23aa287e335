from __future__ import annotations

from typing import Any, Callable

import httpx

from stockdesk.client.http import json_result, network_failure
from stockdesk.client.query import QueryBuilder
from stockdesk.schemas.common import QueryResult

HeadersFactory = Callable[[], dict[str, str]]


class PostgrestQueryBuilder(QueryBuilder):
    """Query handle executed against a PostgREST ``/rest/v1`` endpoint."""

    def __init__(self, table: str, *, http: httpx.AsyncClient, rest_url: str, headers: HeadersFactory) -> None:
        super().__init__(table)
        self._http = http
        self._rest_url = rest_url
        self._headers = headers

    def _request_headers(self) -> dict[str, str]:
        headers = dict(self._headers())
        if self.method != "GET":
            prefer = ["return=representation"]
            if self.upsert:
                prefer.append("resolution=merge-duplicates")
            headers["Prefer"] = ",".join(prefer)
        return headers

    async def execute(self) -> QueryResult[Any]:
        url = f"{self._rest_url}/{self.table}"
        try:
            response = await self._http.request(
                self.method,
                url,
                params=self.build_params(),
                json=self.payload,
                headers=self._request_headers(),
            )
        except httpx.HTTPError as exc:
            return network_failure(exc, target=url)
        return json_result(response)


async def call_rpc(
    http: httpx.AsyncClient,
    rest_url: str,
    headers: dict[str, str],
    name: str,
    args: dict[str, Any] | None = None,
) -> QueryResult[Any]:
    if not name:
        raise ValueError("Function name must be non-empty")
    url = f"{rest_url}/rpc/{name}"
    try:
        response = await http.post(url, json=args or {}, headers=headers)
    except httpx.HTTPError as exc:
        return network_failure(exc, target=url)
    return json_result(response)
