"""Open a connection pool for the configured dialect."""

from __future__ import annotations

import importlib
import logging
import sqlite3
import uuid
from typing import Any, Callable

from ...settings import DatabaseSettings
from .pool_connector import PoolConnector

logger = logging.getLogger(__name__)

_DRIVERS = {
    "postgres": ("psycopg", "psycopg2"),
    "mysql": ("pymysql",),
}


def load_driver(dialect: str) -> Callable[..., Any]:
    """Return the `connect` callable of the first importable driver.

    Raises:
        RuntimeError: If no driver for `dialect` is installed.
    """

    if dialect == "sqlite":
        return sqlite3.connect
    for module_name in _DRIVERS.get(dialect, ()):
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            continue
        connect = getattr(module, "connect", None)
        if connect is not None:
            return connect
    raise RuntimeError(
        f"No DB-API driver installed for {dialect!r}; "
        f"install one of: {', '.join(_DRIVERS.get(dialect, ())) or 'none known'}."
    )


def connect_pool(settings: DatabaseSettings) -> PoolConnector:
    """Build a `PoolConnector` of up to `settings.pool_size` connections.

    Connections open lazily on first use. `:memory:` SQLite becomes a named
    shared-cache database so every pooled connection sees the same tables.
    """

    connect = load_driver(settings.dialect)
    if settings.dialect == "sqlite":
        database, uri = settings.sqlite_path, False
        if database == ":memory:":
            database = f"file:keyset_pager_{uuid.uuid4().hex}?mode=memory&cache=shared"
            uri = True
        pool = PoolConnector(
            connect,
            database,
            uri=uri,
            check_same_thread=False,
            max_size=settings.pool_size,
        )
        logger.info(
            "Pooling sqlite database %s (%d connections)",
            settings.sqlite_path,
            settings.pool_size,
        )
        return pool

    password = settings.password.get_secret_value()
    if settings.dialect == "postgres":
        pool = PoolConnector(
            connect,
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=password,
            dbname=settings.name,
            max_size=settings.pool_size,
        )
    else:
        pool = PoolConnector(
            connect,
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=password,
            database=settings.name,
            autocommit=True,
            max_size=settings.pool_size,
        )
    logger.info(
        "Pooling %s database %s at %s:%d (%d connections)",
        settings.dialect,
        settings.name,
        settings.host,
        settings.port,
        settings.pool_size,
    )
    return pool
