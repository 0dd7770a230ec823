"""Keyset (cursor) pagination over SQL tables."""

from .core import (
    AsyncListingService,
    ColumnType,
    Direction,
    EntityDescriptor,
    EntityRegistry,
    Equals,
    ExecutionFailed,
    InvalidColumn,
    InvalidCursor,
    InvalidDirection,
    InvalidLimit,
    ListingError,
    ListingPage,
    ListingService,
    OneOf,
    SortColumn,
    assemble_page_query,
    parse_filters,
)
from .ports import AsyncDatabase, Database, PoolConnector, connect_pool, dialect_for

__all__ = [
    "AsyncListingService",
    "ColumnType",
    "Direction",
    "EntityDescriptor",
    "EntityRegistry",
    "Equals",
    "ExecutionFailed",
    "InvalidColumn",
    "InvalidCursor",
    "InvalidDirection",
    "InvalidLimit",
    "ListingError",
    "ListingPage",
    "ListingService",
    "OneOf",
    "SortColumn",
    "assemble_page_query",
    "parse_filters",
    "AsyncDatabase",
    "Database",
    "PoolConnector",
    "connect_pool",
    "dialect_for",
]
