"""Core port contracts used by adapters, executors, and listing services."""

from __future__ import annotations

from typing import Any, List, Protocol

from .types import QueryParams, RowMapping


class DialectPort(Protocol):
    """Dialect behavior required by query compilation and schema helpers."""

    name: str
    paramstyle: str

    def q(self, ident: str) -> str: ...

    def placeholder(self, key: str) -> str: ...

    def adapt_param(self, value: Any) -> Any: ...

    def auto_pk_sql(self, pk_name: str) -> str: ...


class DatabasePort(Protocol):
    """Store behavior required by `PageExecutor`.

    `fetchall` raises on execution or connectivity failure and returns an
    empty list when the query matches no rows.
    """

    dialect: DialectPort

    def execute(self, sql: str, params: QueryParams = None) -> Any: ...

    def fetchall(self, sql: str, params: QueryParams = None) -> List[RowMapping]: ...


class AsyncDatabasePort(Protocol):
    """Async store behavior required by `AsyncPageExecutor`."""

    dialect: DialectPort

    async def execute(self, sql: str, params: QueryParams = None) -> Any: ...

    async def fetchall(self, sql: str, params: QueryParams = None) -> List[RowMapping]: ...
