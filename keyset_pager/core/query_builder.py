"""SQL builders for keyset page queries.

This module compiles filter sets into predicate fragments and assembles the
full page statement: cursor predicate, filters, ordering and limit. All data
values are bound parameters; identifiers are quoted by the dialect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .contracts import DialectPort
from .direction import Direction, comparison_operator
from .errors import InvalidColumn, InvalidLimit
from .filters import Equals, FilterSet, OneOf
from .types import PositionalParams


@dataclass(frozen=True)
class CompiledFragment:
    """Predicate clauses (joined with `AND` by the caller) and their params."""

    clauses: Tuple[str, ...]
    params: PositionalParams


@dataclass(frozen=True)
class PageQuery:
    """One assembled keyset page statement.

    Attributes:
        sql: Statement text with dialect placeholders.
        params: Bound values, aligned 1:1 with the placeholders.
        sort_column: Physical column the page is ordered and keyed by.
        direction: Direction used for both the cursor operator and ordering.
        limit: Maximum number of rows the page may contain.
    """

    sql: str
    params: PositionalParams
    sort_column: str
    direction: Direction
    limit: int


def compile_filters(
    filters: Optional[FilterSet], dialect: DialectPort
) -> CompiledFragment:
    """Compile a filter set into `field = p` / `field IN (p, ...)` clauses.

    Clauses are emitted in mapping order. A `OneOf` without values emits
    nothing.

    Args:
        filters: Field name -> filter variant, or `None`.
        dialect: SQL dialect used for identifier quoting and placeholders.

    Returns:
        Compiled clauses and parameters in emission order.
    """

    clauses: List[str] = []
    params: PositionalParams = []
    if not filters:
        return CompiledFragment((), params)

    for field_name, item in filters.items():
        col_sql = dialect.q(field_name)
        if isinstance(item, OneOf):
            if not item.values:
                continue
            placeholders = ", ".join(dialect.placeholder(field_name) for _ in item.values)
            clauses.append(f"{col_sql} IN ({placeholders})")
            params.extend(dialect.adapt_param(value) for value in item.values)
        elif isinstance(item, Equals):
            clauses.append(f"{col_sql} = {dialect.placeholder(field_name)}")
            params.append(dialect.adapt_param(item.value))
        else:
            raise TypeError(
                f"Filter for {field_name!r} must be Equals or OneOf, got {type(item).__name__}."
            )

    return CompiledFragment(tuple(clauses), params)


def compile_order_by(sort_column: str, direction: Direction, dialect: DialectPort) -> str:
    """Compile the single-column `ORDER BY` fragment."""

    return f" ORDER BY {dialect.q(sort_column)} {direction.value}"


def append_limit(
    sql: str, params: PositionalParams, *, limit: int, dialect: DialectPort
) -> Tuple[str, PositionalParams]:
    """Append `LIMIT` with the limit bound as the last parameter."""

    return f"{sql} LIMIT {dialect.placeholder('limit')}", [*params, limit]


def assemble_page_query(
    table: str,
    sort_column: str,
    cursor: Any,
    direction: Any,
    limit: int,
    filters: Optional[FilterSet],
    dialect: DialectPort,
) -> PageQuery:
    """Build one keyset page statement.

    The result reads
    `SELECT * FROM t WHERE col <op> p [AND filter ...] ORDER BY col dir LIMIT p`
    with the cursor as the first parameter and the limit as the last.

    Raises:
        InvalidDirection: If `direction` is not ascending or descending.
        InvalidColumn: If `sort_column` is empty.
        InvalidLimit: If `limit` is not a positive integer.
    """

    resolved = Direction.parse(direction)
    operator = comparison_operator(resolved)
    if not isinstance(sort_column, str) or not sort_column.strip():
        raise InvalidColumn("sort column must be a non-empty column name")
    _validate_limit(limit)

    col_sql = dialect.q(sort_column)
    sql = (
        f"SELECT * FROM {dialect.q(table)} "
        f"WHERE {col_sql} {operator} {dialect.placeholder(sort_column)}"
    )
    params: PositionalParams = [dialect.adapt_param(cursor)]

    fragment = compile_filters(filters, dialect)
    for clause in fragment.clauses:
        sql += f" AND {clause}"
    params.extend(fragment.params)

    sql += compile_order_by(sort_column, resolved, dialect)
    sql, params = append_limit(sql, params, limit=limit, dialect=dialect)

    return PageQuery(
        sql=sql,
        params=params,
        sort_column=sort_column,
        direction=resolved,
        limit=limit,
    )


def _validate_limit(limit: Any) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidLimit(f"limit must be a positive integer, got {limit!r}")
