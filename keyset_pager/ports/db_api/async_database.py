"""Async DB adapter implementation for the core async database port."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from typing import Any, Callable, Mapping

from ...core._async_utils import _close_quietly, _maybe_await
from ...core.types import QueryParams, RowMapping, Rows
from .dialects import Dialect
from .pool_connector import PoolConnector

logger = logging.getLogger(__name__)


class _Loan:
    """Connection lent to one worker-thread call, and whether its caller left."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.conn: Any = None
        self.abandoned = False


class AsyncDatabase:
    """Async database wrapper that normalizes execute and row mapping behavior.

    `conn` is an async driver connection (psycopg `AsyncConnection`,
    aiosqlite), awaited directly, or a `PoolConnector` of plain DB-API
    connections. Pooled calls borrow a connection inside a worker thread so
    the event loop keeps serving other requests. Cancelling a pooled call
    interrupts its statement through `Dialect.interrupt`. A single plain
    DB-API connection is given a private pool of one; sqlite3 connections
    then need `check_same_thread=False`.
    """

    def __init__(
        self,
        conn: Any | PoolConnector,
        dialect: Dialect,
        *,
        acquire_timeout: float | None = None,
    ):
        """Create async database adapter.

        Args:
            conn: Async or DB-API connection object, or `PoolConnector`.
            dialect: Concrete SQL dialect instance.
            acquire_timeout: Seconds a pooled call waits for a free connection.
        """

        self._pool: PoolConnector | None = None
        self._owns_pool = False
        self._lent = False
        self._closed = False
        self.conn: Any | None = conn
        if isinstance(conn, PoolConnector):
            self._pool = conn
            self.conn = None
        elif _is_sync_connection(conn):
            self._pool = PoolConnector(self._lend_connection, max_size=1)
            self._owns_pool = True
        self.dialect = dialect
        self.acquire_timeout = acquire_timeout

    def _lend_connection(self) -> Any:
        self._lent = True
        return self.conn

    def _require_open(self) -> None:
        if self._closed:
            raise RuntimeError("connection is closed")

    async def execute(self, sql: str, params: QueryParams = None) -> Any:
        """Execute SQL with optional parameters.

        Returns the open cursor for a direct connection. A pooled statement
        is committed before its connection goes back, so nothing is returned.
        """

        self._require_open()
        if self._pool is not None:
            await self._run_pooled(lambda conn: _execute_and_commit(conn, sql, params))
            return None
        cur = await _maybe_await(self.conn.cursor())
        try:
            if params is None:
                await _maybe_await(cur.execute(sql))
            else:
                await _maybe_await(cur.execute(sql, params))
        except BaseException:
            await _close_quietly(cur)
            raise
        return cur

    def _row_to_mapping(self, cursor: Any, row: Any) -> RowMapping:
        """Normalize row object to mapping.

        Supports mapping rows directly and tuple/list rows via
        `cursor.description`.
        """

        if isinstance(row, Mapping):
            return row

        if isinstance(row, (tuple, list)):
            desc = getattr(cursor, "description", None)
            if not desc:
                raise TypeError(
                    "Cursor has no description; cannot map tuple rows to dict."
                )
            cols = [d[0] for d in desc]
            return dict(zip(cols, row, strict=True))

        try:
            return dict(row)
        except (TypeError, ValueError):
            pass

        raise TypeError(f"Unsupported row type: {type(row)}")

    async def fetchall(self, sql: str, params: QueryParams = None) -> Rows:
        """Execute query and return all rows as normalized mappings."""

        self._require_open()
        if self._pool is not None:
            return await self._run_pooled(lambda conn: self._fetch_rows(conn, sql, params))
        cur = await self.execute(sql, params)
        try:
            rows = await _maybe_await(cur.fetchall())
            return [self._row_to_mapping(cur, r) for r in rows]
        finally:
            await _close_quietly(cur)

    def _fetch_rows(self, conn: Any, sql: str, params: QueryParams) -> Rows:
        cur = conn.cursor()
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
            return [self._row_to_mapping(cur, r) for r in cur.fetchall()]
        finally:
            close = getattr(cur, "close", None)
            if callable(close):
                close()

    async def _run_pooled(self, work: Callable[[Any], Any]) -> Any:
        loan = _Loan()
        try:
            return await asyncio.to_thread(self._call_with_loan, work, loan)
        except asyncio.CancelledError:
            self._abandon(loan)
            raise

    def _call_with_loan(self, work: Callable[[Any], Any], loan: _Loan) -> Any:
        conn = self._pool.acquire(timeout=self.acquire_timeout)
        with loan.lock:
            if loan.abandoned:
                self._pool.release(conn)
                raise RuntimeError("call was cancelled before it started")
            loan.conn = conn
        try:
            return work(conn)
        finally:
            with loan.lock:
                loan.conn = None
            self._pool.release(conn)

    def _abandon(self, loan: _Loan) -> None:
        with loan.lock:
            loan.abandoned = True
            conn = loan.conn
            if conn is None:
                return
            try:
                interrupted = self.dialect.interrupt(conn)
            except Exception as exc:
                logger.warning(
                    "Interrupting a cancelled %s query failed: %s",
                    self.dialect.name,
                    type(exc).__name__,
                )
                return
        if not interrupted:
            logger.warning(
                "Cancelled %s query cannot be interrupted; it runs to completion",
                self.dialect.name,
            )

    async def aclose(self) -> None:
        """Close the underlying connection.

        A shared pool only stops lending to this adapter; its owner closes it.
        """

        if self._closed:
            return
        self._closed = True
        if self._pool is not None:
            if self._owns_pool:
                self._pool.close()
            if self._lent or not self._owns_pool:
                return
        close = getattr(self.conn, "close", None)
        if callable(close):
            await _maybe_await(close())

    async def __aenter__(self) -> AsyncDatabase:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.aclose()


def _execute_and_commit(conn: Any, sql: str, params: QueryParams) -> None:
    cur = conn.cursor()
    try:
        if params is None:
            cur.execute(sql)
        else:
            cur.execute(sql, params)
        conn.commit()
    finally:
        close = getattr(cur, "close", None)
        if callable(close):
            close()


def _is_sync_connection(conn: Any) -> bool:
    close = getattr(type(conn), "close", None)
    return callable(close) and not inspect.iscoroutinefunction(close)
