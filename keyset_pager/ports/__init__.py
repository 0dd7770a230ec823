"""Public port exports for concrete adapter implementations."""

from .db_api import (
    AsyncDatabase,
    Database,
    Dialect,
    MySQLDialect,
    PoolConnector,
    PostgresDialect,
    SQLiteDialect,
    connect_pool,
    dialect_for,
)

__all__ = [
    "Database",
    "AsyncDatabase",
    "Dialect",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
    "PoolConnector",
    "connect_pool",
    "dialect_for",
]
