"""Public core API for keyset query building, execution, and listing."""

from .descriptors import ColumnType, EntityDescriptor, EntityRegistry, SortColumn
from .direction import Direction, comparison_operator
from .errors import (
    ExecutionFailed,
    InvalidColumn,
    InvalidCursor,
    InvalidDirection,
    InvalidLimit,
    ListingError,
)
from .executor import AsyncPageExecutor, PageExecutor, PageResult
from .filters import Equals, Filter, FilterSet, OneOf, parse_filters
from .listing import AsyncListingService, ListingPage, ListingService
from .models import DataclassModel, row_to_model, table_name
from .query_builder import CompiledFragment, PageQuery, assemble_page_query, compile_filters
from .schema import apply_schema, create_sort_indexes_sql, create_table_sql, insert_rows

__all__ = [
    "ColumnType",
    "EntityDescriptor",
    "EntityRegistry",
    "SortColumn",
    "Direction",
    "comparison_operator",
    "ListingError",
    "InvalidDirection",
    "InvalidColumn",
    "InvalidLimit",
    "InvalidCursor",
    "ExecutionFailed",
    "PageExecutor",
    "AsyncPageExecutor",
    "PageResult",
    "Equals",
    "OneOf",
    "Filter",
    "FilterSet",
    "parse_filters",
    "ListingService",
    "AsyncListingService",
    "ListingPage",
    "DataclassModel",
    "row_to_model",
    "table_name",
    "CompiledFragment",
    "PageQuery",
    "assemble_page_query",
    "compile_filters",
    "apply_schema",
    "create_sort_indexes_sql",
    "create_table_sql",
    "insert_rows",
]
