"""Page executors: run an assembled page query and derive the next cursor."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Type, TypeVar

from .contracts import AsyncDatabasePort, DatabasePort
from .errors import ExecutionFailed
from .models import DataclassModel, require_dataclass_model, row_to_model
from .query_builder import PageQuery
from .types import QueryParams, Rows

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataclassModel)


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """Rows of one page in requested order plus the next cursor.

    `last_row` is the row nearest the page boundary. `next_cursor` is its sort
    column value when the page is full; a short or empty page is the last one
    and carries no cursor.
    """

    rows: List[T]
    last_row: Optional[T]
    next_cursor: Any

    @property
    def has_next(self) -> bool:
        return self.next_cursor is not None


class PageExecutor(Generic[T]):
    """Runs page queries against a `DatabasePort` and scans typed rows."""

    def __init__(self, db: DatabasePort, model: Type[T]):
        require_dataclass_model(model)
        self.db = db
        self.model = model

    def execute(self, query: PageQuery) -> PageResult[T]:
        """Run `query` and return a complete page.

        Raises:
            ExecutionFailed: If the store or row scanning fails. No rows are
                returned in that case.
        """

        _log_query(query)
        try:
            rows = self.db.fetchall(query.sql, query.params)
            return _build_page(self.model, rows, query)
        except Exception as exc:
            raise _execution_failed(self.model, exc) from exc


class AsyncPageExecutor(Generic[T]):
    """Async counterpart of `PageExecutor` with timeout support."""

    def __init__(self, db: AsyncDatabasePort, model: Type[T]):
        require_dataclass_model(model)
        self.db = db
        self.model = model

    async def execute(
        self, query: PageQuery, *, timeout: Optional[float] = None
    ) -> PageResult[T]:
        """Run `query` and return a complete page.

        Args:
            query: Assembled page query.
            timeout: Seconds before the in-flight store call is cancelled.

        Raises:
            ExecutionFailed: If the store or row scanning fails.
            TimeoutError: If `timeout` elapses first.
            asyncio.CancelledError: If the calling task is cancelled.
        """

        _log_query(query)
        if timeout is None:
            return await self._fetch_page(query)
        try:
            return await asyncio.wait_for(self._fetch_page(query), timeout)
        except TimeoutError:
            logger.warning(
                "Page query on %s timed out after %.3fs", self.model.__name__, timeout
            )
            raise

    async def _fetch_page(self, query: PageQuery) -> PageResult[T]:
        try:
            rows = await self.db.fetchall(query.sql, query.params)
            return _build_page(self.model, rows, query)
        except Exception as exc:
            raise _execution_failed(self.model, exc) from exc


def _build_page(model: Type[T], rows: Rows, query: PageQuery) -> PageResult[T]:
    scanned = [row_to_model(model, row) for row in rows[: query.limit]]
    if not scanned:
        return PageResult(rows=[], last_row=None, next_cursor=None)
    last_row = scanned[-1]
    next_cursor = None
    if len(scanned) == query.limit:
        next_cursor = getattr(last_row, query.sort_column)
    return PageResult(rows=scanned, last_row=last_row, next_cursor=next_cursor)


def _execution_failed(model: type, exc: Exception) -> ExecutionFailed:
    logger.warning("Page query on %s failed: %s", model.__name__, type(exc).__name__)
    return ExecutionFailed(
        f"{model.__name__} page query failed: {type(exc).__name__}", cause=exc
    )


def _log_query(query: PageQuery) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Executing page query: %s with params: %s",
            query.sql,
            _param_types(query.params),
        )


def _param_types(params: QueryParams) -> str:
    """Describe bound values by type only; values are never logged."""

    if not params:
        return "[]"
    return "[" + ", ".join(type(value).__name__ for value in params) + "]"
