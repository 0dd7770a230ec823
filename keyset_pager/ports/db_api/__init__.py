"""DB-API adapter and dialect exports."""

from .async_database import AsyncDatabase
from .connect import connect_pool, load_driver
from .database import Database
from .dialects import Dialect, MySQLDialect, PostgresDialect, SQLiteDialect, dialect_for
from .pool_connector import PoolConnector

__all__ = [
    "AsyncDatabase",
    "Database",
    "Dialect",
    "MySQLDialect",
    "PoolConnector",
    "PostgresDialect",
    "SQLiteDialect",
    "connect_pool",
    "dialect_for",
    "load_driver",
]
