from __future__ import annotations

from typing import Any, Callable, Sequence

import httpx

from stockdesk.client.http import error_from_response, json_result, network_failure
from stockdesk.schemas.common import QueryResult

HeadersFactory = Callable[[], dict[str, str]]


class StorageBucket:
    """Object operations on one bucket of the ``/storage/v1`` API."""

    def __init__(self, bucket: str, *, http: httpx.AsyncClient, storage_url: str, headers: HeadersFactory) -> None:
        if not bucket:
            raise ValueError("Bucket name must be non-empty")
        self.bucket = bucket
        self._http = http
        self._object_url = f"{storage_url}/object/{bucket}"
        self._headers = headers

    async def upload(
        self,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> QueryResult[dict[str, str]]:
        headers = {**self._headers(), "Content-Type": content_type, "x-upsert": "true" if upsert else "false"}
        url = f"{self._object_url}/{path.lstrip('/')}"
        try:
            response = await self._http.post(url, content=content, headers=headers)
        except httpx.HTTPError as exc:
            return network_failure(exc, target=url)
        result = json_result(response)
        if result.error is not None:
            return result
        return QueryResult(data={"path": path})

    async def download(self, path: str) -> QueryResult[bytes]:
        url = f"{self._object_url}/{path.lstrip('/')}"
        try:
            response = await self._http.get(url, headers=self._headers())
        except httpx.HTTPError as exc:
            return network_failure(exc, target=url)
        if response.is_error:
            return QueryResult(error=error_from_response(response))
        return QueryResult(data=response.content)

    async def remove(self, paths: Sequence[str]) -> QueryResult[Any]:
        try:
            response = await self._http.request(
                "DELETE", self._object_url, json={"prefixes": list(paths)}, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            return network_failure(exc, target=self._object_url)
        return json_result(response)


class StorageClient:
    def __init__(self, *, http: httpx.AsyncClient, storage_url: str, headers: HeadersFactory) -> None:
        self._http = http
        self._storage_url = storage_url
        self._headers = headers

    def from_(self, bucket: str) -> StorageBucket:
        return StorageBucket(bucket, http=self._http, storage_url=self._storage_url, headers=self._headers)
