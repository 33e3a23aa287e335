from __future__ import annotations

from typing import Any, Protocol

from stockdesk.client.query import QueryBuilder
from stockdesk.schemas.common import QueryResult


class DataClient(Protocol):
    """What services need from a client; satisfied by the real one and the double."""

    auth: Any
    storage: Any

    def from_(self, table: str) -> QueryBuilder: ...

    async def rpc(self, name: str, args: dict[str, Any] | None = None) -> QueryResult[Any]: ...

    async def aclose(self) -> None: ...
