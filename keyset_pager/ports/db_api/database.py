"""DB-API adapter implementation for the core database port."""

from __future__ import annotations

import contextlib
from typing import Any, Iterator, Mapping

from ...core.types import QueryParams, RowMapping, Rows
from .dialects import Dialect
from .pool_connector import PoolConnector


class Database:
    """Thin DB-API wrapper that normalizes execute and row mapping behavior."""

    def __init__(self, conn: Any | PoolConnector, dialect: Dialect):
        """Create database adapter.

        Args:
            conn: DB-API connection object or `PoolConnector`. A pooled
                connection is borrowed here and returned by `close()`.
            dialect: Concrete SQL dialect instance.
        """

        self._pool: PoolConnector | None = None
        self._closed = False
        self.conn: Any | None
        if isinstance(conn, PoolConnector):
            self._pool = conn
            self.conn = conn.acquire()
        else:
            self.conn = conn
        self.dialect = dialect

    def _require_open_connection(self) -> Any:
        if self._closed or self.conn is None:
            raise RuntimeError("connection is closed")
        return self.conn

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Provide commit/rollback transaction scope for writes."""

        conn = self._require_open_connection()
        try:
            yield
            conn.commit()
        except BaseException:
            conn.rollback()
            raise

    def execute(self, sql: str, params: QueryParams = None) -> Any:
        """Execute SQL with optional parameters and return cursor."""

        conn = self._require_open_connection()
        cur = conn.cursor()
        if params is None:
            cur.execute(sql)
        else:
            cur.execute(sql, params)
        return cur

    def executemany(self, sql: str, rows: list[list[Any]]) -> Any:
        """Execute one statement for every parameter row."""

        conn = self._require_open_connection()
        cur = conn.cursor()
        cur.executemany(sql, rows)
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

    def fetchall(self, sql: str, params: QueryParams = None) -> Rows:
        """Execute query and return all rows as normalized mappings."""

        cur = self.execute(sql, params)
        try:
            rows = cur.fetchall()
            return [self._row_to_mapping(cur, r) for r in rows]
        finally:
            close = getattr(cur, "close", None)
            if callable(close):
                close()

    def close(self) -> None:
        """Close the underlying connection, or return it to its pool."""

        if self._closed:
            return
        conn = self.conn
        self._closed = True
        self.conn = None
        if self._pool is not None:
            self._pool.release(conn)
            return
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
