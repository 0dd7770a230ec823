"""Table and sort-index DDL for registered entities.

Production schemas are provisioned outside this package; these helpers create
an equivalent schema for tests and local development. Every sortable column
gets its own index so the cursor predicate, `ORDER BY` and `LIMIT` can be
served from the index.
"""

from __future__ import annotations

import logging
from dataclasses import MISSING, Field
from datetime import datetime
from typing import Any, List, Mapping, Sequence

from .contracts import DialectPort
from .descriptors import EntityDescriptor
from .models import model_fields, model_type_hints, unwrap_optional

logger = logging.getLogger(__name__)


def create_table_sql(
    descriptor: EntityDescriptor[Any], dialect: DialectPort, *, if_not_exists: bool = True
) -> str:
    """Build `CREATE TABLE` for the descriptor's model."""

    hints = model_type_hints(descriptor.model)
    columns = [
        _column_sql(field, hints.get(field.name, field.type), dialect)
        for field in model_fields(descriptor.model)
    ]
    prefix = "CREATE TABLE IF NOT EXISTS" if if_not_exists else "CREATE TABLE"
    return f"{prefix} {dialect.q(descriptor.table)} ({', '.join(columns)});"


def create_sort_indexes_sql(
    descriptor: EntityDescriptor[Any], dialect: DialectPort, *, if_not_exists: bool = True
) -> List[str]:
    """Build one `CREATE INDEX` per distinct sortable column."""

    statements: List[str] = []
    seen: set[str] = set()
    for column in descriptor.sort_columns.values():
        if column.name in seen:
            continue
        seen.add(column.name)
        index_name = default_index_name(descriptor.table, column.name)
        prefix = "CREATE INDEX"
        if if_not_exists and dialect.name in {"sqlite", "postgres"}:
            prefix += " IF NOT EXISTS"
        statements.append(
            f"{prefix} {dialect.q(index_name)} ON {dialect.q(descriptor.table)} "
            f"({dialect.q(column.name)});"
        )
    return statements


def apply_schema(db: Any, descriptor: EntityDescriptor[Any]) -> None:
    """Create the descriptor's table and sort indexes in one transaction."""

    statements = [create_table_sql(descriptor, db.dialect)]
    statements.extend(create_sort_indexes_sql(descriptor, db.dialect))
    with db.transaction():
        for sql in statements:
            db.execute(sql)
    logger.info("Applied schema for %s (%d statements)", descriptor.table, len(statements))


def default_index_name(table: str, column: str) -> str:
    raw_name = f"idx_{table}_{column}"
    return "".join(char if char.isalnum() or char == "_" else "_" for char in raw_name)


def _column_sql(field: Field[Any], annotation: Any, dialect: DialectPort) -> str:
    if field.metadata.get("pk") and field.metadata.get("auto"):
        return dialect.auto_pk_sql(field.name)

    base_type, nullable = unwrap_optional(annotation)
    parts = [dialect.q(field.name), _resolve_sql_type(base_type)]
    parts.append("NULL" if nullable else "NOT NULL")
    if field.metadata.get("pk"):
        parts.append("PRIMARY KEY")
    elif field.metadata.get("unique"):
        parts.append("UNIQUE")
    if base_type is datetime and field.default is MISSING and field.default_factory is MISSING:
        parts.append("DEFAULT CURRENT_TIMESTAMP")
    return " ".join(parts)


def _resolve_sql_type(base_type: Any) -> str:
    if base_type is datetime:
        return "TIMESTAMP"
    if base_type is int:
        return "INTEGER"
    if base_type is str:
        return "VARCHAR(255)"
    return "TEXT"


def insert_rows(
    db: Any, descriptor: EntityDescriptor[Any], rows: Sequence[Mapping[str, Any]]
) -> int:
    """Insert plain row mappings, binding values through the dialect.

    Every mapping must carry the same keys. Timestamps are bound with
    `adapt_param`, the same conversion applied to cursors, so stored values
    and cursor values compare consistently.

    Returns:
        Number of rows inserted.
    """

    if not rows:
        return 0
    columns = list(rows[0])
    descriptor.require_columns(columns)
    dialect = db.dialect
    column_sql = ", ".join(dialect.q(name) for name in columns)
    placeholders = ", ".join(dialect.placeholder(name) for name in columns)
    sql = f"INSERT INTO {dialect.q(descriptor.table)} ({column_sql}) VALUES ({placeholders})"
    values = []
    for row in rows:
        if list(row) != columns:
            raise ValueError("All rows must provide the same columns in the same order.")
        values.append([dialect.adapt_param(row[name]) for name in columns])
    with db.transaction():
        db.executemany(sql, values)
    return len(values)
