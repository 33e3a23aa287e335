"""Chainable query handle shared by the HTTP client and the in-memory double.

A handle records *intent* (which table, which verb, which filters, how to
shape the rows) and only talks to a backend once a terminal method runs:
``execute()``, ``single()``, ``maybe_single()`` or awaiting the handle itself.
Every terminal resolves to a :class:`QueryResult`; expected failures are
returned in ``result.error`` and never raised.
"""

from __future__ import annotations

import enum
import json
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Generator, Iterable, Mapping, Sequence

from stockdesk.schemas.common import QueryResult, not_found_error

_RESERVED_CHARS = set(',.:()"')


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return _format_value(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _quote(value: Any) -> str:
    text = _format_value(value)
    if any(char in _RESERVED_CHARS for char in text) or text != text.strip():
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


def _format_collection(value: Any) -> str:
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), default=str)
    if isinstance(value, str):
        # range literals such as "[1,5)" pass through untouched
        return value
    return "{" + ",".join(_quote(item) for item in value) + "}"


class QueryBuilder(ABC):
    """Records select/insert/update/delete intent against one table."""

    # When False, ``single()`` returns the first row instead of failing on
    # more than one row.
    strict_single: bool = True

    def __init__(self, table: str) -> None:
        if not isinstance(table, str) or not table.strip():
            raise ValueError("Table name must be a non-empty identifier")
        self.table = table
        self.method = "GET"
        self.columns = "*"
        self.payload: Any = None
        self.upsert = False
        self.filters: list[tuple[str, str]] = []
        self.orders: list[str] = []
        self.limit_count: int | None = None
        self.offset_count: int | None = None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def _add_filter(self, column: str, expression: str) -> "QueryBuilder":
        self.filters.append((column, expression))
        return self

    # ---------------- Intent ----------------
    def select(self, columns: str = "*") -> "QueryBuilder":
        self._record("select", columns)
        # collapse whitespace so multi-line embed declarations stay valid in a URL
        self.columns = "".join(columns.split()) or "*"
        return self

    def insert(self, records: Mapping[str, Any] | Sequence[Mapping[str, Any]], *, upsert: bool = False) -> "QueryBuilder":
        self._record("insert", records)
        self.method = "POST"
        self.payload = records
        self.upsert = upsert
        return self

    def update(self, patch: Mapping[str, Any]) -> "QueryBuilder":
        self._record("update", patch)
        self.method = "PATCH"
        self.payload = patch
        return self

    def delete(self) -> "QueryBuilder":
        self._record("delete")
        self.method = "DELETE"
        self.payload = None
        return self

    # ---------------- Filters ----------------
    def eq(self, column: str, value: Any) -> "QueryBuilder":
        self._record("eq", column, value)
        return self._add_filter(column, f"eq.{_format_value(value)}")

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        self._record("neq", column, value)
        return self._add_filter(column, f"neq.{_format_value(value)}")

    def gt(self, column: str, value: Any) -> "QueryBuilder":
        self._record("gt", column, value)
        return self._add_filter(column, f"gt.{_format_value(value)}")

    def gte(self, column: str, value: Any) -> "QueryBuilder":
        self._record("gte", column, value)
        return self._add_filter(column, f"gte.{_format_value(value)}")

    def lt(self, column: str, value: Any) -> "QueryBuilder":
        self._record("lt", column, value)
        return self._add_filter(column, f"lt.{_format_value(value)}")

    def lte(self, column: str, value: Any) -> "QueryBuilder":
        self._record("lte", column, value)
        return self._add_filter(column, f"lte.{_format_value(value)}")

    def like(self, column: str, pattern: str) -> "QueryBuilder":
        self._record("like", column, pattern)
        return self._add_filter(column, f"like.{pattern}")

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        self._record("ilike", column, pattern)
        return self._add_filter(column, f"ilike.{pattern}")

    def is_(self, column: str, value: bool | None) -> "QueryBuilder":
        self._record("is", column, value)
        return self._add_filter(column, f"is.{_format_value(value)}")

    def in_(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        values = list(values)
        self._record("in", column, values)
        return self._add_filter(column, "in.(" + ",".join(_quote(v) for v in values) + ")")

    def contains(self, column: str, value: Any) -> "QueryBuilder":
        self._record("contains", column, value)
        return self._add_filter(column, f"cs.{_format_collection(value)}")

    def contained_by(self, column: str, value: Any) -> "QueryBuilder":
        self._record("containedBy", column, value)
        return self._add_filter(column, f"cd.{_format_collection(value)}")

    def match(self, query: Mapping[str, Any]) -> "QueryBuilder":
        self._record("match", dict(query))
        for column, value in query.items():
            self.filters.append((column, f"eq.{_format_value(value)}"))
        return self

    def not_(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        self._record("not", column, operator, value)
        return self._add_filter(column, f"not.{operator}.{_format_value(value)}")

    def or_(self, filters: str, *, foreign_table: str | None = None) -> "QueryBuilder":
        self._record("or", filters, foreign_table)
        key = f"{foreign_table}.or" if foreign_table else "or"
        return self._add_filter(key, f"({filters})")

    def filter(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        self._record("filter", column, operator, value)
        return self._add_filter(column, f"{operator}.{_format_value(value)}")

    # ---------------- Shaping ----------------
    def order(
        self,
        column: str,
        *,
        desc: bool = False,
        nulls_first: bool | None = None,
        foreign_table: str | None = None,
    ) -> "QueryBuilder":
        self._record("order", column, desc)
        term = f"{column}.{'desc' if desc else 'asc'}"
        if nulls_first is not None:
            term += ".nullsfirst" if nulls_first else ".nullslast"
        if foreign_table:
            self.filters.append((f"{foreign_table}.order", term))
        else:
            self.orders.append(term)
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._record("limit", count)
        if count < 0:
            raise ValueError("limit must be >= 0")
        self.limit_count = count
        return self

    def offset(self, count: int) -> "QueryBuilder":
        self._record("offset", count)
        if count < 0:
            raise ValueError("offset must be >= 0")
        self.offset_count = count
        return self

    def range(self, start: int, end: int) -> "QueryBuilder":
        """Inclusive row window, ``range(0, 9)`` yields the first ten rows."""
        self._record("range", start, end)
        if start < 0 or end < start:
            raise ValueError("range expects 0 <= start <= end")
        self.offset_count = start
        self.limit_count = end - start + 1
        return self

    # ---------------- Serialisation ----------------
    def build_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self.method == "GET" or self.columns != "*" or self.payload is not None:
            params.append(("select", self.columns))
        params.extend(self.filters)
        if self.orders:
            params.append(("order", ",".join(self.orders)))
        if self.limit_count is not None:
            params.append(("limit", str(self.limit_count)))
        if self.offset_count is not None:
            params.append(("offset", str(self.offset_count)))
        return params

    # ---------------- Resolution ----------------
    @abstractmethod
    async def execute(self) -> QueryResult[Any]:
        """Run the recorded operation and return the result pair."""

    def __await__(self) -> Generator[Any, None, QueryResult[Any]]:
        return self.execute().__await__()

    async def single(self) -> QueryResult[Any]:
        """Resolve to exactly one row; anything else is a ``PGRST116`` error."""
        result = await self.execute()
        if result.error is not None:
            return result
        rows = _as_rows(result.data)
        if not rows or (self.strict_single and len(rows) > 1):
            return QueryResult(error=not_found_error())
        return QueryResult(data=rows[0])

    async def maybe_single(self) -> QueryResult[Any]:
        """Resolve to one row or ``None``; several rows are an error."""
        result = await self.execute()
        if result.error is not None:
            return result
        rows = _as_rows(result.data)
        if not rows:
            return QueryResult(data=None)
        if self.strict_single and len(rows) > 1:
            return QueryResult(error=not_found_error())
        return QueryResult(data=rows[0])

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.method} {self.table} params={self.build_params()!r}>"


def _as_rows(data: Any) -> list[Any]:
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]
