"""Fixed-size, thread-safe pool of DB-API connections."""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from collections.abc import Callable, Iterator
from typing import Any
from urllib.parse import parse_qs, urlparse

logger = logging.getLogger(__name__)


class PoolConnector:
    """Lends DB-API connections to one thread at a time.

    Connections are opened lazily up to `max_size`. A connection returned
    with an open transaction is rolled back (`transaction_guard="rollback"`)
    or closed (`"discard"`) before anyone else can borrow it.
    """

    def __init__(
        self,
        connect: Callable[..., Any],
        *connect_args: Any,
        max_size: int = 5,
        transaction_guard: str = "rollback",
        reset_session: bool = True,
        **connect_kwargs: Any,
    ):
        if max_size < 1:
            raise ValueError("max_size must be >= 1.")
        if transaction_guard not in {"rollback", "discard"}:
            raise ValueError("transaction_guard must be 'rollback' or 'discard'.")
        _validate_sqlite_pool(connect, connect_args, connect_kwargs, max_size=max_size)

        self._connect = connect
        self._connect_args = connect_args
        self._connect_kwargs = connect_kwargs
        self._max_size = max_size
        self._transaction_guard = transaction_guard
        self._reset_session = reset_session

        self._idle: list[Any] = []
        self._borrowed_ids: set[int] = set()
        self._known_ids: set[int] = set()
        self._creating = 0
        self._closed = False
        self._condition = threading.Condition()

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self, timeout: float | None = None) -> Any:
        """Borrow one connection, waiting up to `timeout` seconds for a free slot.

        Raises:
            TimeoutError: If no connection frees up in time.
            RuntimeError: If the pool is closed.
        """

        with self._condition:
            deadline = None if timeout is None else time.monotonic() + timeout
            while True:
                self._ensure_open()
                if self._idle:
                    conn = self._idle.pop()
                    self._borrowed_ids.add(id(conn))
                    return conn
                if len(self._known_ids) + self._creating < self._max_size:
                    self._creating += 1
                    break
                if deadline is None:
                    self._condition.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError("Timed out waiting for a pooled DB connection.")
                self._condition.wait(remaining)

        try:
            conn = self._connect(*self._connect_args, **self._connect_kwargs)
        except BaseException:
            with self._condition:
                self._creating -= 1
                self._condition.notify()
            raise

        with self._condition:
            self._creating -= 1
            if not self._closed:
                self._known_ids.add(id(conn))
                self._borrowed_ids.add(id(conn))
                logger.debug(
                    "Opened pooled connection (%d of %d)",
                    len(self._known_ids),
                    self._max_size,
                )
                return conn
            self._condition.notify()
        _close_connection(conn)
        raise RuntimeError("PoolConnector is closed.")

    def release(self, conn: Any) -> None:
        """Return a borrowed connection, rolling back any open transaction."""

        self._take_back(conn)
        should_close = False
        cleanup_error: Exception | None = None
        try:
            if _in_transaction(conn):
                if self._transaction_guard == "discard":
                    should_close = True
                else:
                    conn.rollback()
            if self._reset_session and not should_close:
                _reset_session(conn)
        except Exception as exc:
            cleanup_error = exc
            should_close = True

        self._settle(conn, should_close)
        if cleanup_error is not None:
            raise RuntimeError(
                "Failed to clean pooled DB connection before returning it."
            ) from cleanup_error

    def discard(self, conn: Any) -> None:
        """Close a borrowed connection instead of returning it to the pool.

        Used for connections left in an unknown state, such as one whose
        query was abandoned mid-flight.
        """

        self._take_back(conn)
        self._settle(conn, should_close=True)

    @contextlib.contextmanager
    def connection(self, timeout: float | None = None) -> Iterator[Any]:
        """Borrow and auto-release one connection."""

        conn = self.acquire(timeout=timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self) -> None:
        """Close idle connections and refuse further borrowing.

        Connections still on loan are closed when they come back.
        """

        with self._condition:
            if self._closed:
                return
            self._closed = True
            idle = list(self._idle)
            self._idle.clear()
            for conn in idle:
                self._known_ids.discard(id(conn))
            self._condition.notify_all()

        for conn in idle:
            _close_connection(conn)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("PoolConnector is closed.")

    def _take_back(self, conn: Any) -> None:
        with self._condition:
            if id(conn) not in self._borrowed_ids:
                raise ValueError(
                    "Connection was not acquired from this pool or already released."
                )
            self._borrowed_ids.remove(id(conn))

    def _settle(self, conn: Any, should_close: bool) -> None:
        with self._condition:
            if self._closed or should_close:
                self._known_ids.discard(id(conn))
                should_close = True
            else:
                self._idle.append(conn)
            self._condition.notify()
        if should_close:
            _close_connection(conn)


def _close_connection(conn: Any) -> None:
    close = getattr(conn, "close", None)
    if callable(close):
        close()


def _in_transaction(conn: Any) -> bool:
    in_tx = getattr(conn, "in_transaction", None)
    if isinstance(in_tx, bool):
        return in_tx

    info = getattr(conn, "info", None)
    tx_status = getattr(info, "transaction_status", None)
    if tx_status is not None:
        # psycopg3: 0 = idle.
        return tx_status != 0

    status = getattr(conn, "status", None)
    if status is not None and "psycopg2" in type(conn).__module__.lower():
        # psycopg2: STATUS_READY == 1 means idle.
        return status != 1

    return False


def _reset_session(conn: Any) -> None:
    statements = _reset_statements(conn)
    if not statements:
        return

    cur = conn.cursor()
    try:
        for sql in statements:
            cur.execute(sql)
    finally:
        close = getattr(cur, "close", None)
        if callable(close):
            close()

    commit = getattr(conn, "commit", None)
    if callable(commit):
        commit()


def _reset_statements(conn: Any) -> list[str]:
    module_name = type(conn).__module__.lower()
    if "psycopg" in module_name:
        return ["RESET ALL"]
    if "pymysql" in module_name or "mysqldb" in module_name:
        return ["SET SESSION autocommit = 1", "SET SESSION time_zone = DEFAULT"]
    return []


def _validate_sqlite_pool(
    connect: Callable[..., Any],
    connect_args: tuple[Any, ...],
    connect_kwargs: dict[str, Any],
    *,
    max_size: int,
) -> None:
    if max_size <= 1:
        return
    module_name = getattr(connect, "__module__", None) or ""
    if not module_name.startswith(("sqlite3", "_sqlite3")):
        return

    if connect_kwargs.get("check_same_thread", True):
        raise ValueError(
            "PoolConnector detected sqlite with max_size > 1 and check_same_thread=True. "
            "Use check_same_thread=False for pooled multi-thread usage."
        )

    database = connect_args[0] if connect_args else connect_kwargs.get("database")
    if isinstance(database, str) and _is_private_sqlite_memory(
        database, uri=bool(connect_kwargs.get("uri", False))
    ):
        raise ValueError(
            "PoolConnector detected sqlite private in-memory database with max_size > 1. "
            "Use max_size=1, or shared-memory URI "
            '(e.g. "file:pages?mode=memory&cache=shared", uri=True).'
        )


def _is_private_sqlite_memory(database: str, *, uri: bool) -> bool:
    if database == ":memory:":
        return True
    if not uri or not database.startswith("file:"):
        return False

    lowered = database.lower()
    if lowered.startswith("file::memory:"):
        return "cache=shared" not in lowered

    query = parse_qs(urlparse(database).query)
    mode = (query.get("mode", [""])[0] or "").lower()
    cache = (query.get("cache", [""])[0] or "").lower()
    return mode == "memory" and cache != "shared"
